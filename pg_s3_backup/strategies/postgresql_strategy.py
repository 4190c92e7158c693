"""
Estrategia de dump para PostgreSQL (pg_dump | gzip)
"""
import gzip
import os
import shutil
import subprocess
import tempfile
import threading
from typing import BinaryIO, List
from .base_strategy import DumpStrategy
from ..exceptions import DumpFailed


class PostgreSQLDumpStrategy(DumpStrategy):
    """Ejecuta pg_dump en formato SQL plano y comprime la salida con gzip"""

    CHUNK_SIZE = 64 * 1024

    def __init__(self, pg_dump_path: str = "", timeout: int = 3600):
        """
        Args:
            pg_dump_path: Directorio opcional donde está el ejecutable pg_dump
            timeout: Segundos máximos antes de matar el proceso
        """
        super().__init__()
        self.pg_dump_path = pg_dump_path
        self.timeout = timeout

    @property
    def executable(self) -> str:
        if self.pg_dump_path:
            return os.path.join(self.pg_dump_path, 'pg_dump')
        return 'pg_dump'

    def build_command(self, database_url: str) -> List[str]:
        return [
            self.executable,
            f'--dbname={database_url}',
            '--format=plain',        # Formato SQL plano
        ]

    def dump(self, database_url: str, destination: BinaryIO) -> None:
        """
        Ejecuta pg_dump y escribe su stdout comprimido en destination

        Cualquier salida en stderr se considera un fallo, aunque el código
        de salida sea 0.

        Args:
            database_url: Cadena de conexión pasada a --dbname
            destination: Archivo binario abierto para escritura

        Raises:
            DumpFailed: Herramienta ausente, timeout, stderr no vacío o código != 0
        """
        tool_error = self._validate_tools([self.executable])
        if tool_error:
            raise DumpFailed(tool_error)

        timed_out = threading.Event()

        with tempfile.TemporaryFile() as stderr_file:
            try:
                process = subprocess.Popen(
                    self.build_command(database_url),
                    stdout=subprocess.PIPE,
                    stderr=stderr_file
                )
            except OSError as e:
                raise DumpFailed(f"No se pudo ejecutar {self.executable}: {e}") from e

            def kill_on_timeout():
                timed_out.set()
                process.kill()

            timer = threading.Timer(self.timeout, kill_on_timeout)
            timer.start()
            try:
                # filename='' evita guardar el nombre en la cabecera, igual que gzip como filtro
                with process.stdout, gzip.GzipFile(filename='', mode='wb', fileobj=destination) as compressed:
                    shutil.copyfileobj(process.stdout, compressed, self.CHUNK_SIZE)
                returncode = process.wait()
            except OSError as e:
                raise DumpFailed(f"Error escribiendo el backup comprimido: {e}") from e
            finally:
                timer.cancel()
                if process.poll() is None:
                    process.kill()
                    process.wait()

            stderr_file.seek(0)
            stderr = stderr_file.read().decode('utf-8', errors='replace').strip()

        if timed_out.is_set():
            raise DumpFailed(f"Timeout: pg_dump tardó más de {self.timeout} segundos")

        if stderr:
            self.logger.error(f"pg_dump stderr: {stderr}")
            raise DumpFailed(f"pg_dump error: {stderr}")

        if returncode != 0:
            raise DumpFailed(f"pg_dump terminó con código {returncode}")

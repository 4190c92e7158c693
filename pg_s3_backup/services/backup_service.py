"""
Servicio que genera el archivo de backup en el directorio de staging
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from ..config import Config
from ..exceptions import ValidationFailed
from ..logger import LoggerService
from ..models import BackupArtifact
from ..strategies.base_strategy import DumpStrategy


def database_label(database_url: str) -> str:
    """
    Obtiene el nombre de la base de datos del último segmento de la URL

    Args:
        database_url: Cadena de conexión

    Returns:
        Nombre de la base de datos, o "database" si la URL no tiene ruta
    """
    # La query puede contener rutas (sslrootcert=/etc/...), se descarta primero
    path = database_url.split('?', 1)[0].split('#', 1)[0]
    if '/' not in path:
        return "database"
    return path.rsplit('/', 1)[1] or "database"


def backup_timestamp(now: datetime) -> str:
    """ISO-8601 en UTC con milisegundos, con ':' y '.' reemplazados por '-'"""
    now = now.astimezone(timezone.utc)
    return f"{now.strftime('%Y-%m-%dT%H-%M-%S')}-{now.microsecond // 1000:03d}Z"


def build_backup_filename(database_url: str, now: datetime) -> str:
    """
    Genera el nombre del archivo de backup

    Args:
        database_url: Cadena de conexión
        now: Momento de creación del backup

    Returns:
        Nombre con formato backup-<db>-<timestamp>.sql.gz
    """
    return f"backup-{database_label(database_url)}-{backup_timestamp(now)}.sql.gz"


class BackupService:
    """Genera y valida el dump comprimido de una base de datos"""

    def __init__(self, strategy: DumpStrategy, backup_dir: Path):
        """
        Inicializa el servicio de backup

        Args:
            strategy: Estrategia que produce el dump comprimido
            backup_dir: Directorio de staging
        """
        self.strategy = strategy
        self.backup_dir = Path(backup_dir)
        self.logger = LoggerService.get_logger("BackupService")

    def produce(self, database_url: str, now: Optional[datetime] = None) -> BackupArtifact:
        """
        Genera el backup y devuelve la referencia al archivo

        Args:
            database_url: Cadena de conexión de la base de datos
            now: Momento de creación (por defecto, ahora en UTC)

        Returns:
            BackupArtifact con ruta, nombre y tamaño

        Raises:
            DumpFailed: Si el dump falla
            ValidationFailed: Si el archivo resultante no es válido
        """
        now = now or datetime.now(timezone.utc)
        db_name = database_label(database_url)
        file_name = build_backup_filename(database_url, now)
        file_path = self.backup_dir / file_name

        self.backup_dir.mkdir(parents=True, exist_ok=True)

        self.logger.info(f"Creando backup de la base de datos {db_name}...")

        try:
            with open(file_path, 'wb') as destination:
                self.strategy.dump(database_url, destination)
            size = self._validate(file_path)
        except Exception as e:
            self.logger.error(f"Error creando backup: {e}")
            self._discard(file_path)
            raise

        self.logger.info(f"Backup creado en {file_path} ({size} bytes)")

        return BackupArtifact(
            database_name=db_name,
            created_at=backup_timestamp(now),
            size_bytes=size,
            file_path=file_path,
            file_name=file_name
        )

    def _validate(self, file_path: Path) -> int:
        """
        Verifica que el archivo exista y tenga un tamaño mínimo

        Returns:
            Tamaño del archivo en bytes
        """
        if not file_path.is_file():
            raise ValidationFailed(f"El archivo de backup no existe: {file_path}")

        size = file_path.stat().st_size
        if size < Config.MIN_BACKUP_SIZE_BYTES:
            raise ValidationFailed(
                f"El archivo de backup está vacío o es demasiado pequeño ({size} bytes)"
            )
        return size

    def _discard(self, file_path: Path):
        """Elimina un archivo de backup parcial o inválido"""
        if not file_path.exists():
            return
        try:
            file_path.unlink()
            self.logger.info(f"Eliminado archivo de backup inválido: {file_path}")
        except OSError as e:
            self.logger.error(f"No se pudo eliminar el archivo de backup inválido: {e}")

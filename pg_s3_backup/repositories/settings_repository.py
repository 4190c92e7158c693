"""
Repositorio para leer la configuración desde el entorno (Dependency Inversion)
"""
import os
from pathlib import Path
from typing import Mapping, Optional
from ..config import Config
from ..logger import LoggerService
from ..models import BackupSettings


class SettingsRepository:
    """Construye BackupSettings a partir de variables de entorno"""

    TRUE_VALUES = ('true', '1', 'yes', 'on')

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """
        Inicializa el repositorio de configuración

        Args:
            environ: Mapeo de variables a usar (por defecto os.environ)
        """
        self.environ = environ if environ is not None else os.environ
        self.logger = LoggerService.get_logger("SettingsRepository")
        self._settings = None

    def load(self) -> BackupSettings:
        """
        Lee el entorno una única vez y devuelve la configuración inmutable

        Returns:
            Objeto BackupSettings
        """
        if self._settings is not None:
            return self._settings

        backup_dir = self._get('BACKUP_DIR')

        self._settings = BackupSettings(
            database_url=self._get('BACKUP_DATABASE_URL'),
            backup_dir=Path(backup_dir) if backup_dir else Config.BACKUP_DIR,
            pg_dump_path=self._get('PG_DUMP_PATH') or "",
            cron_expression=self._get('CRON_JOB_INTERVAL'),
            run_on_startup=self._get_bool('RUN_ON_STARTUP'),
            s3_region=self._get('AWS_S3_REGION'),
            s3_bucket=self._get('AWS_S3_BUCKET'),
            access_key_id=self._get('AWS_ACCESS_KEY_ID'),
            secret_access_key=self._get('AWS_SECRET_ACCESS_KEY'),
            s3_endpoint_url=self._get('AWS_S3_ENDPOINT_URL'),
            dump_timeout=self._get_int('DUMP_TIMEOUT_SECONDS', Config.DUMP_TIMEOUT_SECONDS),
            upload_timeout=self._get_int('UPLOAD_TIMEOUT_SECONDS', Config.UPLOAD_TIMEOUT_SECONDS),
        )
        return self._settings

    def _get(self, key: str) -> Optional[str]:
        """Devuelve el valor sin espacios, o None si está vacío"""
        value = self.environ.get(key)
        if value is None or not value.strip():
            return None
        return value.strip()

    def _get_bool(self, key: str) -> bool:
        value = self._get(key)
        return value is not None and value.lower() in self.TRUE_VALUES

    def _get_int(self, key: str, default: int) -> int:
        value = self._get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{key} debe ser un número entero: {value!r}") from None

    def create_env_example(self, target: Optional[Path] = None) -> bool:
        """
        Crea un archivo .env.example con todas las variables reconocidas

        Args:
            target: Ruta destino (por defecto Config.ENV_EXAMPLE_FILE)

        Returns:
            True si se creó exitosamente
        """
        target = target or Config.ENV_EXAMPLE_FILE
        lines = [
            "# Variables de entorno del backup de PostgreSQL a S3",
            "# Copia este archivo como .env y completa con tus credenciales",
            "",
        ]
        lines.extend(f"{key}={value}" for key, value in Config.ENV_KEYS.items())

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, 'w', encoding='utf-8') as f:
                f.write("\n".join(lines) + "\n")
            self.logger.info(f"Creado: {target}")
            return True
        except OSError as e:
            self.logger.error(f"Error creando {target}: {e}")
            return False

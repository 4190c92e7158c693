"""
Servicio principal que orquesta un backup completo: dump, subida y limpieza
"""
import time
from pathlib import Path
from ..exceptions import ConfigurationMissing
from ..logger import LoggerService
from ..models import BackupArtifact, BackupSettings
from ..strategies.postgresql_strategy import PostgreSQLDumpStrategy
from .backup_service import BackupService
from .upload_service import UploadService


class BackupPipeline:
    """Secuencia BackupService -> UploadService -> borrado del archivo local"""

    def __init__(self, settings: BackupSettings, backup_service: BackupService, upload_service: UploadService):
        """
        Args:
            settings: Configuración del proceso
            backup_service: Productor del archivo de backup
            upload_service: Servicio de subida a S3
        """
        self.settings = settings
        self.backup_service = backup_service
        self.upload_service = upload_service
        self.logger = LoggerService.get_logger("BackupPipeline")

    @classmethod
    def from_settings(cls, settings: BackupSettings) -> 'BackupPipeline':
        """Construye el pipeline con pg_dump y S3"""
        strategy = PostgreSQLDumpStrategy(settings.pg_dump_path, settings.dump_timeout)
        return cls(
            settings,
            BackupService(strategy, settings.backup_dir),
            UploadService(settings)
        )

    def run(self) -> BackupArtifact:
        """
        Ejecuta el backup completo

        Si cualquier etapa falla, el error se registra y se propaga; el
        llamador decide terminar el proceso. Ningún archivo de una ejecución
        fallida queda en el directorio de staging.

        Returns:
            El artefacto subido (ya eliminado del disco local)

        Raises:
            ConfigurationMissing: Si BACKUP_DATABASE_URL no está definida
            BackupError: Si falla el dump, la validación o la subida
        """
        if not self.settings.database_url:
            error = ConfigurationMissing('BACKUP_DATABASE_URL')
            self.logger.error(str(error))
            raise error

        self.logger.info("=" * 70)
        self.logger.info("INICIANDO PROCESO DE BACKUP")
        self.logger.info("=" * 70)
        start_time = time.time()

        try:
            artifact = self.backup_service.produce(self.settings.database_url)
            try:
                self.upload_service.upload(artifact.file_path, artifact.file_name)
            except Exception:
                self._discard(artifact.file_path)
                raise
            self._remove_local(artifact.file_path)
        except Exception as e:
            self.logger.error(f"Proceso de backup fallido: {e}", exc_info=True)
            raise

        self.logger.info(
            f"Proceso de backup completado exitosamente ({time.time() - start_time:.2f}s)"
        )
        return artifact

    def _remove_local(self, file_path: Path):
        if file_path.exists():
            file_path.unlink()
            self.logger.info(f"Eliminado archivo local de backup: {file_path}")

    def _discard(self, file_path: Path):
        """Elimina el archivo tras una subida fallida sin ocultar el error original"""
        try:
            self._remove_local(file_path)
        except OSError as e:
            self.logger.error(f"No se pudo eliminar el archivo local de backup {file_path}: {e}")

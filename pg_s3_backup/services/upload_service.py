"""
Servicio para subir los backups a S3
"""
from pathlib import Path
import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from ..config import Config
from ..exceptions import ConfigurationMissing, UploadFailed
from ..logger import LoggerService
from ..models import BackupSettings


class UploadService:
    """Sube el archivo de backup a un bucket S3 con una única operación put"""

    def __init__(self, settings: BackupSettings):
        """
        Inicializa el servicio de subida

        Args:
            settings: Configuración con región, bucket y credenciales
        """
        self.settings = settings
        self.logger = LoggerService.get_logger("UploadService")

    def _create_client(self):
        """Crea el cliente S3 sin reintentos automáticos"""
        boto_config = BotoConfig(
            retries={'total_max_attempts': 1},
            connect_timeout=self.settings.upload_timeout,
            read_timeout=self.settings.upload_timeout
        )
        return boto3.client(
            's3',
            region_name=self.settings.s3_region,
            aws_access_key_id=self.settings.access_key_id,
            aws_secret_access_key=self.settings.secret_access_key,
            endpoint_url=self.settings.s3_endpoint_url,
            config=boto_config
        )

    def upload(self, file_path: Path, file_name: str):
        """
        Sube el archivo completo usando file_name como clave

        Args:
            file_path: Ruta local del backup
            file_name: Clave del objeto en el bucket

        Raises:
            ConfigurationMissing: Si no hay bucket configurado
            UploadFailed: Si la operación put falla
        """
        bucket = self.settings.s3_bucket
        if not bucket:
            raise ConfigurationMissing('AWS_S3_BUCKET')

        with open(file_path, 'rb') as f:
            body = f.read()

        self.logger.info(f"Subiendo backup al bucket S3 {bucket}...")

        try:
            client = self._create_client()
            client.put_object(
                Bucket=bucket,
                Key=file_name,
                Body=body,
                ContentType=Config.CONTENT_TYPE
            )
        except (BotoCoreError, ClientError) as e:
            self.logger.error(f"Error subiendo a S3: {e}")
            raise UploadFailed(f"No se pudo subir {file_name} a {bucket}: {e}") from e

        self.logger.info(f"Backup subido a S3: s3://{bucket}/{file_name}")

"""
Modelos de datos del sistema
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class BackupSettings:
    """Configuración inmutable del proceso, leída una sola vez al iniciar"""
    database_url: Optional[str]
    backup_dir: Path
    pg_dump_path: str = ""
    cron_expression: Optional[str] = None
    run_on_startup: bool = False
    s3_region: Optional[str] = None
    s3_bucket: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    s3_endpoint_url: Optional[str] = None
    dump_timeout: int = 3600
    upload_timeout: int = 300

    def __post_init__(self):
        """Validación después de inicialización"""
        if self.dump_timeout < 1:
            raise ValueError("DUMP_TIMEOUT_SECONDS debe ser mayor a 0")
        if self.upload_timeout < 1:
            raise ValueError("UPLOAD_TIMEOUT_SECONDS debe ser mayor a 0")

    @property
    def is_scheduled(self) -> bool:
        """True si hay una expresión cron configurada"""
        return bool(self.cron_expression and self.cron_expression.strip())


@dataclass(frozen=True)
class BackupArtifact:
    """Archivo de backup comprimido en el directorio de staging"""
    database_name: str
    created_at: str
    size_bytes: int
    file_path: Path
    file_name: str

    def __str__(self):
        return f"{self.file_name} ({self.size_bytes} bytes)"

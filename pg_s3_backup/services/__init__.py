"""
Servicios de la aplicación
"""
from .backup_service import BackupService, build_backup_filename
from .pipeline_service import BackupPipeline
from .scheduler_service import SchedulerService, build_cron_trigger
from .upload_service import UploadService

__all__ = [
    'BackupService',
    'BackupPipeline',
    'SchedulerService',
    'UploadService',
    'build_backup_filename',
    'build_cron_trigger'
]

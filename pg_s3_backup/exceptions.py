"""
Excepciones del pipeline de backup
"""


class BackupError(Exception):
    """Error base de cualquier etapa del backup"""


class ConfigurationMissing(BackupError):
    """Falta una variable de configuración obligatoria"""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"La variable de entorno {key} no está definida")


class DumpFailed(BackupError):
    """pg_dump falló o escribió en stderr"""


class ValidationFailed(BackupError):
    """El archivo de backup no existe o es demasiado pequeño"""


class UploadFailed(BackupError):
    """La subida a S3 falló"""


class InvalidSchedule(BackupError):
    """La expresión cron no es válida"""

    def __init__(self, expression: str, reason: str):
        self.expression = expression
        super().__init__(f"Expresión cron inválida '{expression}': {reason}")

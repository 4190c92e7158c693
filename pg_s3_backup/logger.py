"""
Logging del proceso de backup: progreso a stdout, errores a stderr y
copia de todo en un archivo diario
"""
import logging
import sys
from datetime import datetime
from .config import Config


class _BelowWarning(logging.Filter):
    """Deja pasar solo registros DEBUG/INFO"""

    def filter(self, record):
        return record.levelno < logging.WARNING


class LoggerService:
    """Registro de loggers con nombre bajo el espacio pg_s3_backup"""

    NAMESPACE = "pg_s3_backup"

    _loggers = {}
    _handlers = None

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Obtiene o crea el logger de un componente

        Args:
            name: Nombre del componente (BackupService, UploadService...)

        Returns:
            Logger configurado
        """
        if name not in cls._loggers:
            cls._loggers[name] = cls._attach(logging.getLogger(f"{cls.NAMESPACE}.{name}"))
        return cls._loggers[name]

    @classmethod
    def capture(cls, library: str) -> logging.Logger:
        """
        Envía los logs de una librería a los mismos destinos

        APScheduler avisa por su propio logger cuando omite un disparo
        porque el backup anterior sigue en curso.
        """
        return cls._attach(logging.getLogger(library))

    @classmethod
    def _attach(cls, logger: logging.Logger) -> logging.Logger:
        logger.setLevel(Config.LOG_LEVEL)
        logger.propagate = False
        for handler in cls._shared_handlers():
            if handler not in logger.handlers:
                logger.addHandler(handler)
        return logger

    @classmethod
    def _shared_handlers(cls) -> list:
        """Crea una sola vez los handlers compartidos por todos los loggers"""
        if cls._handlers is not None:
            return cls._handlers

        Config.ensure_directories()
        formatter = logging.Formatter(Config.LOG_FORMAT)

        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.addFilter(_BelowWarning())

        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.WARNING)

        log_file = Config.LOG_DIR / f"backup_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(log_file, encoding='utf-8')

        cls._handlers = [stdout_handler, stderr_handler, file_handler]
        for handler in cls._handlers:
            handler.setFormatter(formatter)
        return cls._handlers

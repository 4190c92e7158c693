"""
Estrategia base para generar dumps (Strategy Pattern)
"""
from abc import ABC, abstractmethod
import shutil
from typing import BinaryIO, Optional
from ..logger import LoggerService


class DumpStrategy(ABC):
    """Interfaz abstracta para producir el dump comprimido de una base de datos"""

    def __init__(self):
        """Inicializa la estrategia"""
        self.logger = LoggerService.get_logger(self.__class__.__name__)

    @abstractmethod
    def dump(self, database_url: str, destination: BinaryIO) -> None:
        """
        Escribe el dump comprimido de la base de datos en destination

        Args:
            database_url: Cadena de conexión de la base de datos
            destination: Archivo binario abierto para escritura

        Raises:
            DumpFailed: Si la herramienta falla o escribe diagnósticos en stderr
        """
        pass

    def _validate_tools(self, tools: list) -> Optional[str]:
        """
        Valida que las herramientas necesarias estén disponibles

        Args:
            tools: Lista de herramientas requeridas

        Returns:
            None si todo está OK, mensaje de error en caso contrario
        """
        for tool in tools:
            if not shutil.which(tool):
                return f"La herramienta {tool} no está instalada"
        return None

"""
Estrategias para generar dumps de bases de datos
"""
from .base_strategy import DumpStrategy
from .postgresql_strategy import PostgreSQLDumpStrategy

__all__ = [
    'DumpStrategy',
    'PostgreSQLDumpStrategy'
]

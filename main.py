#!/usr/bin/env python3
"""
Backup periódico de PostgreSQL a S3
Punto de entrada principal

Uso:
    python main.py                  # Programado si hay CRON_JOB_INTERVAL, si no una vez
    python main.py once             # Ejecutar backup una vez
    python main.py scheduler --now  # Servicio programado con backup inicial
    python main.py --help           # Ayuda
"""
import sys
import argparse
from pathlib import Path

# Agregar el directorio raíz al path
sys.path.insert(0, str(Path(__file__).parent))

from pg_s3_backup.config import Config
from pg_s3_backup.exceptions import InvalidSchedule
from pg_s3_backup.logger import LoggerService
from pg_s3_backup.repositories.settings_repository import SettingsRepository
from pg_s3_backup.services.pipeline_service import BackupPipeline
from pg_s3_backup.services.scheduler_service import SchedulerService


def parse_arguments(argv=None):
    """
    Parsea argumentos de línea de comandos

    Args:
        argv: Lista de argumentos (por defecto sys.argv)

    Returns:
        Namespace con los argumentos parseados
    """
    parser = argparse.ArgumentParser(
        description='Backup periódico de PostgreSQL a S3',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Ejemplos:
  python main.py                    # Según CRON_JOB_INTERVAL y RUN_ON_STARTUP
  python main.py once               # Ejecutar backup una sola vez
  python main.py scheduler --now    # Servicio programado + backup inmediato
  python main.py --init             # Crear .env.example
        """
    )

    parser.add_argument(
        'mode',
        nargs='?',
        choices=['auto', 'once', 'scheduler'],
        default='auto',
        help='Modo de ejecución (default: auto)'
    )

    parser.add_argument(
        '--now',
        action='store_true',
        help='Ejecutar backup inmediatamente al iniciar scheduler'
    )

    parser.add_argument(
        '--init',
        action='store_true',
        help='Crear archivo .env.example con las variables reconocidas'
    )

    return parser.parse_args(argv)


def initialize_config() -> int:
    """Crea .env.example si no existe"""
    logger = LoggerService.get_logger("Init")

    if Config.ENV_EXAMPLE_FILE.exists():
        logger.info(f"Ya existe: {Config.ENV_EXAMPLE_FILE}")
        return 0

    if not SettingsRepository().create_env_example(Config.ENV_EXAMPLE_FILE):
        return 1

    logger.info("=" * 70)
    logger.info("IMPORTANTE:")
    logger.info("1. Copia .env.example como .env")
    logger.info("2. Edita .env con la URL de la base de datos y las credenciales de S3")
    logger.info("3. Ejecuta nuevamente este script")
    logger.info("=" * 70)
    return 0


def run_once(pipeline: BackupPipeline) -> int:
    """
    Ejecuta un único backup

    Returns:
        0 si terminó correctamente, 1 si falló
    """
    try:
        pipeline.run()
    except Exception:
        return 1
    return 0


def main(argv=None) -> int:
    """Función principal; devuelve el código de salida"""
    args = parse_arguments(argv)

    if args.init:
        return initialize_config()

    logger = LoggerService.get_logger("Main")
    settings = SettingsRepository().load()

    if not settings.database_url:
        logger.error("La variable de entorno BACKUP_DATABASE_URL no está definida")
        return 1

    pipeline = BackupPipeline.from_settings(settings)
    run_on_startup = settings.run_on_startup or args.now
    scheduled = args.mode == 'scheduler' or (args.mode == 'auto' and settings.is_scheduled)

    if not scheduled:
        logger.info("Modo: Ejecución única")
        return run_once(pipeline)

    if not settings.is_scheduled:
        logger.error("El modo scheduler requiere CRON_JOB_INTERVAL")
        return 1

    scheduler = SchedulerService(pipeline)
    try:
        scheduler.schedule(settings.cron_expression, run_immediately=run_on_startup)
    except InvalidSchedule as e:
        logger.error(f"Formato de CRON_JOB_INTERVAL inválido: {e}")
        return 1

    return scheduler.serve_forever()


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nPrograma interrumpido por el usuario")
        sys.exit(0)
    except Exception as e:
        print(f"Error crítico: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)

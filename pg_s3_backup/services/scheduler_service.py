"""
Servicio de programación de tareas de backup
"""
import signal
import threading
import time
from typing import Optional
from apscheduler.job import Job
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from ..exceptions import InvalidSchedule
from ..logger import LoggerService
from .pipeline_service import BackupPipeline


# Nombres de días según cron (0 y 7 = domingo); APScheduler numera desde el lunes
DAY_NAMES = ['sun', 'mon', 'tue', 'wed', 'thu', 'fri', 'sat']


def _translate_day_of_week(field: str) -> str:
    """Convierte los valores numéricos de día de la semana de cron a nombres"""
    days = []
    for part in field.split(','):
        base, _, step = part.partition('/')
        if base == '*' and step:
            base = '0-6'
        if not any(c.isdigit() for c in base):
            days.append(part)
            continue

        step_value = int(step) if step else 1
        if '-' in base:
            start, end = (int(value) for value in base.split('-', 1))
        else:
            start = int(base)
            end = 7 if step else start

        if not (0 <= start <= 7 and 0 <= end <= 7) or step_value < 1:
            raise ValueError(f"Día de la semana fuera de rango: {part}")

        days.extend(DAY_NAMES[value % 7] for value in range(start, end + 1, step_value))

    return ','.join(dict.fromkeys(days))


def build_cron_trigger(expression: str) -> CronTrigger:
    """
    Convierte una expresión cron de 5 o 6 campos en un CronTrigger

    Con 6 campos el primero son los segundos.

    Args:
        expression: Expresión cron

    Returns:
        CronTrigger equivalente

    Raises:
        InvalidSchedule: Si la expresión no es válida
    """
    fields = (expression or "").split()
    if len(fields) == 5:
        second = '0'
        minute, hour, day, month, day_of_week = fields
    elif len(fields) == 6:
        second, minute, hour, day, month, day_of_week = fields
    else:
        raise InvalidSchedule(expression, f"se esperaban 5 o 6 campos, hay {len(fields)}")

    try:
        return CronTrigger(
            second=second,
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=_translate_day_of_week(day_of_week)
        )
    except (ValueError, TypeError) as e:
        raise InvalidSchedule(expression, str(e)) from e


class SchedulerService:
    """Servicio para programar y ejecutar backups automáticos"""

    JOB_ID = "database_backup"

    def __init__(self, pipeline: BackupPipeline, scheduler: Optional[BackgroundScheduler] = None,
                 poll_interval: float = 1.0):
        """
        Inicializa el servicio de programación

        Args:
            pipeline: Pipeline de backup a ejecutar
            scheduler: Scheduler de APScheduler (por defecto BackgroundScheduler)
            poll_interval: Segundos entre comprobaciones del bucle principal
        """
        self.pipeline = pipeline
        self.scheduler = scheduler or BackgroundScheduler()
        self.poll_interval = poll_interval
        self.logger = LoggerService.get_logger("SchedulerService")
        LoggerService.capture("apscheduler")
        self.exit_code = 0
        self._stop_event = threading.Event()
        self._previous_handlers = {}

    def schedule(self, cron_expression: str, run_immediately: bool = False) -> Job:
        """
        Registra el trabajo recurrente de backup

        Si una ejecución sigue en curso cuando llega el siguiente disparo,
        ese disparo se omite (max_instances=1).

        Args:
            cron_expression: Expresión cron de 5 o 6 campos
            run_immediately: Si es True, ejecuta un backup al registrar

        Returns:
            Trabajo registrado

        Raises:
            InvalidSchedule: Si la expresión no es válida; no se registra nada
        """
        self.logger.info(f"Programando backups con el patrón cron: {cron_expression}")
        trigger = build_cron_trigger(cron_expression)

        job = self.scheduler.add_job(
            self._run_scheduled_backup,
            trigger=trigger,
            id=self.JOB_ID,
            name="Backup de base de datos",
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

        if run_immediately:
            self.logger.info("Ejecutando backup inicial...")
            self.run_backup()

        return job

    def run_backup(self) -> bool:
        """
        Ejecuta el pipeline; un fallo detiene el servicio con código 1

        Returns:
            True si el backup terminó correctamente
        """
        try:
            self.pipeline.run()
            return True
        except Exception as e:
            self.logger.error(f"Error crítico durante backup, deteniendo el servicio: {e}")
            self.stop(exit_code=1)
            return False

    def _run_scheduled_backup(self):
        """Trabajo invocado por el trigger cron"""
        self.logger.info(f"Ejecutando backup programado a las {time.strftime('%Y-%m-%d %H:%M:%S')}")
        self.run_backup()

    def serve_forever(self) -> int:
        """
        Inicia el scheduler y bloquea hasta recibir una señal o un fallo

        Returns:
            Código de salida del proceso
        """
        if self._stop_event.is_set():
            return self._shutdown()

        self._install_signal_handlers()
        self.scheduler.start()

        self.logger.info("=" * 70)
        self.logger.info("SERVICIO DE BACKUP AUTOMÁTICO INICIADO")
        self.logger.info("=" * 70)
        self.logger.info(f"Próxima ejecución: {self.get_next_run()}")
        self.logger.info("Presiona Ctrl+C para detener el servicio")
        self.logger.info("=" * 70)

        try:
            while not self._stop_event.is_set():
                self._stop_event.wait(self.poll_interval)
        except KeyboardInterrupt:
            self.logger.info("Interrupción de teclado recibida")

        return self._shutdown()

    def stop(self, exit_code: int = 0):
        """
        Solicita la detención del servicio

        Args:
            exit_code: Código de salida; un fallo previo no se sobrescribe
        """
        self.exit_code = max(self.exit_code, exit_code)
        self._stop_event.set()

    def _install_signal_handlers(self):
        for signum in (signal.SIGINT, signal.SIGTERM):
            self._previous_handlers[signum] = signal.signal(signum, self._signal_handler)

    def _restore_signal_handlers(self):
        for signum, handler in self._previous_handlers.items():
            if handler is not None:
                signal.signal(signum, handler)
        self._previous_handlers.clear()

    def _signal_handler(self, signum, frame):
        """
        Manejador de señales para shutdown graceful

        Args:
            signum: Número de señal
            frame: Frame actual
        """
        try:
            signal_name = signal.Signals(signum).name
        except ValueError:
            signal_name = str(signum)

        self.logger.info(f"Señal recibida: {signal_name}")
        self.stop()

    def _shutdown(self) -> int:
        """Detiene el scheduler esperando a que termine el backup en curso"""
        self.logger.info("Deteniendo servicio de backup...")
        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)
        self._restore_signal_handlers()
        self.logger.info(f"Servicio detenido (código de salida {self.exit_code})")
        return self.exit_code

    def get_next_run(self) -> str:
        """
        Obtiene la fecha de la próxima ejecución

        Returns:
            String con la fecha de la próxima ejecución
        """
        job = self.scheduler.get_job(self.JOB_ID)
        next_run = getattr(job, 'next_run_time', None)
        if next_run:
            return next_run.strftime('%Y-%m-%d %H:%M:%S')
        return "No hay ejecuciones programadas"

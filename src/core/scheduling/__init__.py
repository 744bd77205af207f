from core.scheduling.periodic_task import PeriodicTask

__all__ = ["PeriodicTask"]

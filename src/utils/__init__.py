from .task_utils import TaskManager, TimerRegistry, cancel_tasks_with_timeout, safe_close_connection

__all__ = ["TaskManager", "TimerRegistry", "cancel_tasks_with_timeout", "safe_close_connection"]

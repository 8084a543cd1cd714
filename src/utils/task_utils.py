import asyncio
from enum import Enum
from typing import Callable, Dict, Hashable, List, Optional


async def cancel_tasks_with_timeout(
    tasks: List[Optional[asyncio.Task]],
    timeout: float = 2.0,
    logger=None
) -> bool:
    """
    Cancel multiple tasks with timeout protection.

    Args:
        tasks: List of asyncio tasks (None entries are ignored)
        timeout: Maximum time to wait for cancellation
        logger: Optional logger for timeout warnings

    Returns:
        bool: True if all tasks cancelled within timeout, False if timeout occurred
    """
    active_tasks = [task for task in tasks if task and not task.done()]
    if not active_tasks:
        return True

    for task in active_tasks:
        task.cancel()

    try:
        await asyncio.wait_for(
            asyncio.gather(*active_tasks, return_exceptions=True),
            timeout=timeout
        )
        return True
    except asyncio.TimeoutError:
        if logger:
            remaining = [task for task in active_tasks if not task.done()]
            logger.warning("Task cancellation timed out",
                           timeout_seconds=timeout, remaining_tasks=len(remaining))
        return False


async def safe_close_connection(
    connection,
    code: int = 1000,
    reason: str = "",
    timeout: float = 1.0,
    logger=None
) -> bool:
    """
    Close a websocket with timeout protection.

    Returns:
        bool: True if closed within timeout, False otherwise
    """
    if not connection:
        return True

    try:
        await asyncio.wait_for(connection.close(code=code, reason=reason), timeout=timeout)
        return True
    except asyncio.TimeoutError:
        if logger:
            logger.warning("Connection close timed out", timeout_seconds=timeout)
        return False
    except Exception as e:
        if logger:
            logger.error("Error closing connection", error_type=type(e).__name__, error_message=str(e))
        return False


class TaskManager:
    """
    Named task creation with automatic cleanup of finished tasks.
    """

    def __init__(self, name: str = "task_manager"):
        self.name = name
        self._tasks: List[asyncio.Task] = []

    def create_task(self, coro, name: str = None) -> asyncio.Task:
        """Create and track a task."""
        task_name = f"{self.name}.{name}" if name else f"{self.name}.task_{len(self._tasks)}"
        task = asyncio.create_task(coro, name=task_name)
        self._tasks.append(task)

        def cleanup_task(completed_task):
            try:
                self._tasks.remove(completed_task)
            except ValueError:
                pass  # Task already removed

        task.add_done_callback(cleanup_task)
        return task

    @property
    def active_task_count(self) -> int:
        return len([task for task in self._tasks if not task.done()])


class TimerRegistry:
    """
    Cancellable one-shot timers indexed by purpose.

    Scheduling a purpose that already has a pending timer replaces it, so
    each purpose has at most one timer in flight.
    """

    def __init__(self):
        self._handles: Dict[Hashable, asyncio.TimerHandle] = {}

    def schedule(self, purpose: Hashable, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        self.cancel(purpose)
        loop = asyncio.get_running_loop()

        def fire():
            self._handles.pop(purpose, None)
            callback()

        handle = loop.call_later(max(delay, 0.0), fire)
        self._handles[purpose] = handle
        return handle

    def cancel(self, purpose: Hashable) -> bool:
        handle = self._handles.pop(purpose, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> int:
        purposes = list(self._handles)
        for purpose in purposes:
            self.cancel(purpose)
        return len(purposes)

    def is_pending(self, purpose: Hashable) -> bool:
        return purpose in self._handles

    @property
    def pending(self) -> List[Hashable]:
        return list(self._handles)

    def __repr__(self) -> str:
        names = [p.name if isinstance(p, Enum) else str(p) for p in self._handles]
        return f"TimerRegistry(pending={names})"

"""
Error types raised by the task repository and database handle
"""

from typing import Optional


class TaskStoreError(Exception):
    """Base class for every error the task store surfaces"""


class DatabaseError(TaskStoreError):
    """Connection, query or transaction failure; wraps the driver error as __cause__"""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        message = f"{operation} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class NotFoundError(TaskStoreError):
    """A single-row lookup matched zero rows"""

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"task with id {task_id} not found")


class OperationCancelledError(TaskStoreError):
    """The deadline elapsed or the token was cancelled before the operation finished"""

    def __init__(self, reason: str = "operation cancelled"):
        self.reason = reason
        super().__init__(reason)

"""
Task-related Pydantic models
"""

from datetime import datetime
from typing import Any, Mapping

from pydantic import BaseModel


class Task(BaseModel):
    id: int
    title: str
    done: bool = False
    created_at: datetime

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Task":
        """Build a Task from an asyncpg Record or any mapping with the task columns"""
        return cls.model_validate(dict(record))

    def summary_line(self) -> str:
        return f"#{self.id} | {self.title:<24} | done={str(self.done):<5} | {self.created_at.isoformat()}"

"""
Task repository - parameterized SQL over the tasks table
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from tasklist.database.connection import DRIVER_ERRORS, Database
from tasklist.models.task import Task
from tasklist.utils.deadline import Deadline
from tasklist.utils.errors import DatabaseError, NotFoundError, TaskStoreError

logger = logging.getLogger(__name__)

INSERT_TASK = "INSERT INTO tasks (title) VALUES ($1) RETURNING id"
SELECT_ALL = "SELECT id, title, done, created_at FROM tasks ORDER BY id"
SELECT_BY_STATUS = "SELECT id, title, done, created_at FROM tasks WHERE done = $1 ORDER BY id"
SELECT_BY_ID = "SELECT id, title, done, created_at FROM tasks WHERE id = $1"


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise driver failures as DatabaseError, leaving our own errors untouched"""
    try:
        yield
    except TaskStoreError:
        raise
    except DRIVER_ERRORS as e:
        raise DatabaseError(operation, e) from e


class TaskRepository:
    """Create and query tasks through a shared Database handle"""

    def __init__(self, db: Database):
        self.db = db

    async def create_task(self, title: str, *, deadline: Optional[Deadline] = None) -> int:
        """
        Insert one task

        Args:
            title: Task title
            deadline: Optional deadline / cancellation token

        Returns:
            The id assigned by the database
        """
        async def insert() -> int:
            async with self.db.connection() as conn:
                return await conn.fetchval(INSERT_TASK, title)

        with translate_errors("create task"):
            task_id = await (deadline or Deadline()).run(insert())

        logger.info(f"Created task {task_id}: {title!r}")
        return task_id

    async def list_tasks(self, *, deadline: Optional[Deadline] = None) -> List[Task]:
        """All tasks ordered by ascending id; empty list when there are none"""
        with translate_errors("list tasks"):
            records = await (deadline or Deadline()).run(self._fetch(SELECT_ALL))

        logger.debug(f"Listed {len(records)} tasks")
        return [Task.from_record(r) for r in records]

    async def list_by_status(self, done: bool, *, deadline: Optional[Deadline] = None) -> List[Task]:
        """Tasks whose done flag equals ``done``, ordered by ascending id"""
        with translate_errors("list tasks by status"):
            records = await (deadline or Deadline()).run(self._fetch(SELECT_BY_STATUS, done))

        logger.debug(f"Listed {len(records)} tasks with done={done}")
        return [Task.from_record(r) for r in records]

    async def find_by_id(self, task_id: int, *, deadline: Optional[Deadline] = None) -> Task:
        """
        Look up a single task

        Raises:
            NotFoundError: no task has this id
            DatabaseError: the query itself failed
        """
        async def lookup():
            async with self.db.connection() as conn:
                return await conn.fetchrow(SELECT_BY_ID, task_id)

        with translate_errors("find task by id"):
            record = await (deadline or Deadline()).run(lookup())

        if record is None:
            raise NotFoundError(task_id)
        return Task.from_record(record)

    async def create_many(self, titles: Sequence[str], *, deadline: Optional[Deadline] = None) -> List[int]:
        """
        Insert every title in one transaction

        Either all rows are committed or, on the first failure (including a
        cancelled or expired deadline), every insert issued so far is rolled
        back and the error is re-raised. The deadline covers acquiring the
        connection, BEGIN, every insert and COMMIT.

        Returns:
            The new ids, in input order
        """
        titles = list(titles)
        if not titles:
            return []

        deadline = deadline or Deadline()
        task_ids: List[int] = []

        async def insert_all() -> None:
            try:
                async with self.db.transaction() as conn:
                    for title in titles:
                        deadline.check()
                        task_ids.append(await conn.fetchval(INSERT_TASK, title))
                    deadline.check()
            except BaseException as e:
                logger.warning(
                    f"Batch insert rolled back after {len(task_ids)} of {len(titles)} titles: {e!r}"
                )
                raise

        with translate_errors("create tasks in batch"):
            await deadline.run(insert_all())

        logger.info(f"Created {len(task_ids)} tasks in one transaction: {task_ids}")
        return task_ids

    async def _fetch(self, query: str, *args) -> list:
        async with self.db.connection() as conn:
            return await conn.fetch(query, *args)

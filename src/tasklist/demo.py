"""
Demo run: exercise every repository operation once and print the results
"""

import asyncio
import logging
import sys
from typing import List, Optional

from tasklist.config.settings import DATABASE_URL, DEMO_TIMEOUT_SECONDS, LOG_LEVEL
from tasklist.database.connection import Database
from tasklist.models.task import Task
from tasklist.services.task_repository import TaskRepository
from tasklist.utils.deadline import Deadline
from tasklist.utils.error_handling import StructuredLogger
from tasklist.utils.errors import TaskStoreError

logger = logging.getLogger(__name__)

SAMPLE_TITLES = ["Finish lab report #5", "Buy coffee", "Review reports"]
BATCH_TITLES = ["Batch task 1", "Batch task 2"]
LOOKUP_ID = 1


def print_tasks(tasks: List[Task]) -> None:
    if not tasks:
        print("No tasks found.")
        return
    for task in tasks:
        print(task.summary_line())


async def run_demo(
    dsn: str = DATABASE_URL,
    timeout: Optional[float] = DEMO_TIMEOUT_SECONDS,
) -> int:
    """
    Run the fixed demo sequence against the database at ``dsn``

    Returns the process exit code: 1 when the database cannot be opened or
    the first full listing fails, 0 otherwise (individual step failures are
    logged and skipped).
    """
    db = Database(dsn)
    try:
        await db.open()
    except TaskStoreError as e:
        StructuredLogger.log_error(
            "database_open_failed", "Could not open the database", exception=e,
            extra_context={"database_url": dsn}
        )
        return 1

    try:
        repo = TaskRepository(db)
        deadline = Deadline(timeout)

        for title in SAMPLE_TITLES:
            try:
                task_id = await repo.create_task(title, deadline=deadline)
            except TaskStoreError as e:
                StructuredLogger.log_error(
                    "create_task_failed", f"Could not create task {title!r}", exception=e
                )
            else:
                logger.info(f"Inserted task id={task_id} ({title})")

        try:
            tasks = await repo.list_tasks(deadline=deadline)
        except TaskStoreError as e:
            StructuredLogger.log_error("list_tasks_failed", "Could not list tasks", exception=e)
            return 1

        print("=== All tasks ===")
        print_tasks(tasks)

        print("\n=== Incomplete tasks ===")
        try:
            undone = await repo.list_by_status(False, deadline=deadline)
        except TaskStoreError as e:
            StructuredLogger.log_error("list_by_status_failed", "Could not list incomplete tasks", exception=e)
        else:
            print_tasks(undone)

        print(f"\n=== Find task by id ({LOOKUP_ID}) ===")
        try:
            task = await repo.find_by_id(LOOKUP_ID, deadline=deadline)
        except TaskStoreError as e:
            StructuredLogger.log_error(
                "find_by_id_failed", f"Could not find task {LOOKUP_ID}", exception=e
            )
        else:
            print(f"Found: #{task.id} | {task.title} | done={task.done}")

        print("\n=== Batch insert ===")
        try:
            new_ids = await repo.create_many(BATCH_TITLES, deadline=deadline)
        except TaskStoreError as e:
            StructuredLogger.log_error(
                "create_many_failed", "Batch insert rolled back", exception=e,
                extra_context={"titles": BATCH_TITLES}
            )
        else:
            print(f"Added tasks {new_ids} in one transaction")
            try:
                updated = await repo.list_tasks(deadline=deadline)
            except TaskStoreError as e:
                StructuredLogger.log_error("list_tasks_failed", "Could not list tasks", exception=e)
            else:
                print("Updated list:")
                print_tasks(updated)

        return 0
    finally:
        await db.close()


def main() -> None:
    logging.basicConfig(level=LOG_LEVEL)
    sys.exit(asyncio.run(run_demo()))

"""Print the live task collection as it changes.

Opens a sync session (full fetch plus broadcast listener) and prints the
collection and its stats after every change event. Stops on Ctrl+C or when
the listener gives up reconnecting.

Usage:
    uv run python -m scripts.watch_tasks
"""

from __future__ import annotations

import asyncio
import logging
import sys

from dotenv import load_dotenv

from tasksync.client import ApplyOutcome, TaskReconciler, TaskSyncSession
from tasksync.core.config import get_client_settings
from tasksync.domain.enums import TaskSort
from tasksync.domain.exceptions import TransportException
from tasksync.schemas.events import ChangeEvent

logger = logging.getLogger("watch_tasks")


def render(reconciler: TaskReconciler) -> str:
    """One line per task (newest first) plus a stats footer."""
    lines = [
        f"[{t.status.value:<11}] {t.priority.value:<6} {t.due_date} {t.title} (v{t.version})"
        for t in reconciler.view(sort=TaskSort.CREATED_DESC)
    ]
    stats = reconciler.stats()
    lines.append(f"{stats.total} task(s), {stats.completion_percent}% completed")
    return "\n".join(lines)


async def main() -> int:
    load_dotenv(override=True)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    get_client_settings.cache_clear()
    session = TaskSyncSession.from_settings()

    def on_change(event: ChangeEvent, outcome: ApplyOutcome) -> None:
        logger.info("%s: %s", event.type, outcome.value)
        print(render(session.reconciler), flush=True)

    session.subscribe(on_change)
    async with session:
        print(render(session.reconciler), flush=True)
        try:
            await session.wait()
        except TransportException as e:
            logger.error("%s", e.message)
            return 1
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(0)

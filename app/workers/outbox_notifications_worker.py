"""Executable worker that drains the outbox into user notifications.

Run with ``python -m app.workers.outbox_notifications_worker``. Behaviour is
driven by ``OUTBOX_WORKER_*`` environment variables; the default
``OUTBOX_WORKER_MODE=once`` processes one batch and exits, any other mode keeps
polling.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass

from app.core.config import get_settings
from app.core.database import session_scope
from app.modules.audit.repository import AuditRepository
from app.modules.notifications.outbox_worker import NotificationsOutboxWorker
from app.modules.notifications.repository import NotificationsRepository
from app.modules.notifications.senders import InAppNotificationSender

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkerOptions:
    mode: str = "once"
    poll_seconds: int = 10
    batch_size: int = 100
    max_retries: int = 5
    base_backoff_seconds: int = 30
    max_backoff_seconds: int = 300
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> WorkerOptions:
        def _int(name: str, default: int) -> int:
            return int(os.getenv(f"OUTBOX_WORKER_{name}", str(default)))

        return cls(
            mode=os.getenv("OUTBOX_WORKER_MODE", cls.mode).strip().lower(),
            poll_seconds=_int("POLL_SECONDS", cls.poll_seconds),
            batch_size=_int("BATCH_SIZE", cls.batch_size),
            max_retries=_int("MAX_RETRIES", cls.max_retries),
            base_backoff_seconds=_int("BASE_BACKOFF_SECONDS", cls.base_backoff_seconds),
            max_backoff_seconds=_int("MAX_BACKOFF_SECONDS", cls.max_backoff_seconds),
            log_level=os.getenv("OUTBOX_WORKER_LOG_LEVEL", cls.log_level),
        )


async def run_cycle(options: WorkerOptions) -> dict[str, int]:
    """Process one batch; notifications and outbox marks commit together."""
    async with session_scope() as session:
        worker = NotificationsOutboxWorker(
            audit_repository=AuditRepository(session),
            sender=InAppNotificationSender(NotificationsRepository(session)),
            batch_size=options.batch_size,
            max_retries=options.max_retries,
            base_backoff_seconds=options.base_backoff_seconds,
            max_backoff_seconds=options.max_backoff_seconds,
            send_timeout_seconds=get_settings().notification_send_timeout_seconds,
        )
        return await worker.run_once()


async def main() -> None:
    options = WorkerOptions.from_env()
    logging.basicConfig(
        level=options.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if options.mode == "once":
        logger.info("Outbox notifications worker stats: %s", await run_cycle(options))
        return

    while True:
        try:
            logger.info("Outbox notifications worker stats: %s", await run_cycle(options))
        except Exception:
            logger.exception("Outbox notifications worker cycle failed")
        await asyncio.sleep(options.poll_seconds)


if __name__ == "__main__":
    asyncio.run(main())

"""Background delivery of new-lead alerts.

Request handlers only enqueue a job; a single worker task started with the
application drains the queue and fans each job out to the configured
channels (email, SMS). Delivery problems are logged and never reach the
request that created the lead.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Awaitable, Callable

from propertyhub.domain.models import Lead
from propertyhub.services.email_service import send_lead_alert
from propertyhub.services.sms_service import SMSService

logger = logging.getLogger(__name__)

Channel = Callable[[dict], Awaitable[object]]


@dataclass(frozen=True)
class LeadNotification:
    """Snapshot of a committed lead, detached from the DB session."""

    id: str
    lead_type: str
    name: str
    email: str
    phone: str
    message: str
    budget: int | None = None
    requirements: str | None = None
    created_at: datetime | None = None
    property_title: str | None = None

    @classmethod
    def from_lead(cls, lead: Lead, property_title: str | None = None) -> "LeadNotification":
        return cls(
            id=lead.id,
            lead_type=lead.lead_type,
            name=lead.name,
            email=lead.email,
            phone=lead.phone,
            message=lead.message,
            budget=lead.budget,
            requirements=lead.requirements,
            created_at=lead.created_at,
            property_title=property_title,
        )


async def _send_sms_alert(data: dict) -> dict:
    return await SMSService().send_lead_alert(data)


DEFAULT_CHANNELS: tuple[Channel, ...] = (send_lead_alert, _send_sms_alert)


class NotificationDispatcher:
    """Bounded queue plus one worker task."""

    def __init__(self, maxsize: int = 100, channels: tuple[Channel, ...] | None = None):
        self.queue: asyncio.Queue[LeadNotification] = asyncio.Queue(maxsize=maxsize)
        self.channels = DEFAULT_CHANNELS if channels is None else channels
        self._worker: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start(self) -> None:
        if not self.running:
            self._worker = asyncio.create_task(self._run(), name="lead-notifications")

    async def stop(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        if not self.queue.empty():
            logger.warning("Dropping %d undelivered lead notifications on shutdown", self.queue.qsize())

    def submit(self, job: LeadNotification) -> bool:
        """Enqueue without waiting. Returns False when the job had to be dropped."""
        try:
            self.queue.put_nowait(job)
        except asyncio.QueueFull:
            logger.warning("Notification queue full; dropping alert for lead %s", job.id)
            return False
        return True

    async def drain(self) -> None:
        """Wait until every queued job has been handled."""
        await self.queue.join()

    async def deliver(self, job: LeadNotification) -> None:
        data = asdict(job)
        for channel in self.channels:
            try:
                await channel(data)
            except Exception:
                logger.exception(
                    "Lead notification channel %s failed for lead %s",
                    getattr(channel, "__name__", channel), job.id,
                )

    async def _run(self) -> None:
        while True:
            job = await self.queue.get()
            try:
                await self.deliver(job)
            finally:
                self.queue.task_done()

"""Serialized access to a farm from concurrent callers.

A single asyncio task owns the Farm and applies requests one at a time
from a queue, so the machine/batch graph only ever has one writer.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from batchfarm.errors import ServiceNotRunningError
from batchfarm.farm.farm import Farm, JobLocation
from batchfarm.farm.machine import Machine
from batchfarm.farm.models import PrintJob
from batchfarm.utils import get_logger

logger = get_logger("farm.service")


class ServiceStatus(str, Enum):
    """Status of the farm service."""
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass
class _Request:
    action: Callable[[Farm], Any]
    future: asyncio.Future = field(repr=False)


class FarmService:
    """
    Owns a Farm and serializes every mutation through one task.

    Callers await the result of each request; errors raised by the farm
    are re-raised in the caller.
    """

    def __init__(self, farm: Optional[Farm] = None):
        self.farm = farm if farm is not None else Farm()
        self._status = ServiceStatus.STOPPED
        self._queue: Optional[asyncio.Queue] = None
        self._worker_task: Optional[asyncio.Task] = None

    @property
    def status(self) -> ServiceStatus:
        """Get service status."""
        return self._status

    async def start(self) -> None:
        """Start the worker task."""
        if self._status == ServiceStatus.RUNNING:
            return

        self._queue = asyncio.Queue()
        self._status = ServiceStatus.RUNNING
        self._worker_task = asyncio.create_task(self._worker_loop())
        logger.info("Farm service started")

    async def stop(self) -> None:
        """Stop the worker after pending requests are applied."""
        if self._status == ServiceStatus.STOPPED:
            return

        self._status = ServiceStatus.STOPPED
        await self._queue.join()

        if self._worker_task:
            self._worker_task.cancel()
            try:
                await self._worker_task
            except asyncio.CancelledError:
                pass
            self._worker_task = None

        logger.info("Farm service stopped")

    async def _worker_loop(self) -> None:
        """Apply queued requests in arrival order."""
        while True:
            request = await self._queue.get()
            try:
                if request.future.cancelled():
                    continue
                try:
                    result = request.action(self.farm)
                except Exception as e:
                    request.future.set_exception(e)
                else:
                    request.future.set_result(result)
            finally:
                self._queue.task_done()

    async def _call(self, action: Callable[[Farm], Any]) -> Any:
        if self._status != ServiceStatus.RUNNING:
            raise ServiceNotRunningError("Farm service is not running")

        future = asyncio.get_running_loop().create_future()
        await self._queue.put(_Request(action=action, future=future))
        return await future

    async def submit(self, job: PrintJob) -> JobLocation:
        """Admit a job into the farm."""
        return await self._call(lambda farm: farm.add_job(job))

    async def add_machine(self, machine: Machine) -> None:
        await self._call(lambda farm: farm.add_machine(machine))

    async def remove_machine(self, index: int) -> Machine:
        return await self._call(lambda farm: farm.remove_machine(index))

    async def remove_job(self, machine_index: int, batch_index: int, item_index: int) -> PrintJob:
        return await self._call(lambda farm: farm.remove_job(machine_index, batch_index, item_index))

    async def cancel_job(self, job_id: str) -> bool:
        return await self._call(lambda farm: farm.cancel_job(job_id))

    async def get_summary(self) -> dict:
        return await self._call(lambda farm: farm.get_summary())

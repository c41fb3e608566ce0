"""Farm-wide job admission.

The farm searches its machines in order, and each machine's batches in
queue order, for the first batch that accepts a job. When none does, the
placement strategy picks a capable machine and a new batch is opened at
the end of its queue.
"""

from datetime import datetime
from typing import Callable, Iterator, List, NamedTuple, Optional, Tuple, Union

from batchfarm.errors import IndexOutOfRangeError, JobTooLargeError, NoMachinesError, PlacementError
from batchfarm.farm.batch import Batch
from batchfarm.farm.machine import Machine
from batchfarm.farm.models import PrintJob
from batchfarm.farm.placement import (
    PlacementPolicy,
    PlacementStrategy,
    get_placement_strategy,
)
from batchfarm.utils import get_logger, utc_now

logger = get_logger("farm.farm")


class JobLocation(NamedTuple):
    """Position of a job inside the farm."""

    machine_index: int
    batch_index: int
    item_index: int
    job_id: str


class Farm:
    """
    A fleet of machines that admits print jobs into batches.

    Features:
    - First-fit admission in farm order
    - Pluggable placement of new batches
    - Hard rejection of jobs no machine can hold
    - Removal by locator and best-effort cancellation
    """

    def __init__(
        self,
        machines: Optional[List[Machine]] = None,
        placement: Union[PlacementPolicy, str, PlacementStrategy] = PlacementPolicy.EARLIEST_AVAILABLE,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.machines: List[Machine] = list(machines or [])
        self.placement = get_placement_strategy(placement)
        self._clock = clock

    def add_machine(self, machine: Machine) -> None:
        """Add a machine at the end of the search order."""
        self.machines.append(machine)
        logger.info(f"Added machine {machine.name} ({machine.capacity})")

    def remove_machine(self, index: int) -> Machine:
        """Remove and return the machine at `index`."""
        if index < 0 or index >= len(self.machines):
            raise IndexOutOfRangeError("Machine", index, len(self.machines))

        machine = self.machines.pop(index)
        logger.info(f"Removed machine {machine.name} with {machine.job_count} job(s)")
        return machine

    def add_job(self, job: PrintJob) -> JobLocation:
        """
        Admit a job into the first batch that accepts it.

        Args:
            job: The job to admit

        Returns:
            Location of the admitted job

        Raises:
            NoMachinesError: If the farm has no machines
            JobTooLargeError: If no machine can hold the job even alone
            PlacementError: If the placement strategy picks a machine that is not a candidate
        """
        for m_idx, machine in enumerate(self.machines):
            for b_idx, batch in enumerate(machine.schedule):
                if batch.accepts(job):
                    return self._admit(job, m_idx, b_idx, batch)
                logger.debug(f"Batch {b_idx} on {machine.name} does not accept job {job.job_id}")

        if not self.machines:
            logger.warning(f"Rejected job {job.job_id}: farm has no machines")
            raise NoMachinesError(f"Cannot place job {job.job_id}: farm has no machines")

        candidates = [m for m in self.machines if m.can_hold(job.dims)]
        if not candidates:
            logger.warning(f"Rejected job {job.job_id}: {job.dims} exceeds every machine capacity")
            raise JobTooLargeError(job)

        machine = self.placement.choose(candidates)
        if not any(machine is candidate for candidate in candidates):
            logger.warning(f"Placement {self.placement.name} chose {machine!r}, not a candidate for job {job.job_id}")
            raise PlacementError(
                f"Placement {self.placement.name} returned a machine that cannot take job {job.job_id}"
            )

        m_idx = next(i for i, m in enumerate(self.machines) if m is machine)
        batch = machine.open_batch()
        return self._admit(job, m_idx, len(machine.schedule) - 1, batch)

    def _admit(self, job: PrintJob, m_idx: int, b_idx: int, batch: Batch) -> JobLocation:
        batch.add(job)
        machine = self.machines[m_idx]
        machine.reflow()
        logger.info(
            f"Admitted job {job.job_id} to {machine.name} batch {b_idx}, "
            f"est. completion {batch.est_completion_time().isoformat()}"
        )
        return JobLocation(m_idx, b_idx, len(batch) - 1, job.job_id)

    def remove_job(self, machine_index: int, batch_index: int, item_index: int) -> PrintJob:
        """Remove and return the job at the given position."""
        if machine_index < 0 or machine_index >= len(self.machines):
            raise IndexOutOfRangeError("Machine", machine_index, len(self.machines))
        machine = self.machines[machine_index]
        if batch_index < 0 or batch_index >= len(machine.schedule):
            raise IndexOutOfRangeError("Batch", batch_index, len(machine.schedule))

        job = machine.schedule[batch_index].remove(item_index)
        machine.reflow()
        logger.info(f"Removed job {job.job_id} from {machine.name} batch {batch_index}")
        return job

    def iter_jobs(self) -> Iterator[Tuple[JobLocation, PrintJob]]:
        """Iterate over every job with its location."""
        for m_idx, machine in enumerate(self.machines):
            for b_idx, batch in enumerate(machine.schedule):
                for i_idx, job in enumerate(batch.items):
                    yield JobLocation(m_idx, b_idx, i_idx, job.job_id), job

    def find_job(self, job_id: str) -> Optional[JobLocation]:
        """Find where a job is scheduled."""
        for location, _ in self.iter_jobs():
            if location.job_id == job_id:
                return location
        return None

    def get_batch(self, location: JobLocation) -> Batch:
        return self.machines[location.machine_index].schedule[location.batch_index]

    def get_job(self, location: JobLocation) -> PrintJob:
        return self.get_batch(location).items[location.item_index]

    def estimated_completion(self, job_id: str) -> Optional[datetime]:
        """Estimated completion time of the batch holding the job."""
        location = self.find_job(job_id)
        if location is None:
            return None
        return self.get_batch(location).est_completion_time()

    def cancel_job(self, job_id: str, now: Optional[datetime] = None) -> bool:
        """
        Cancel a job whose batch has not started yet.

        Returns:
            True if the job was removed, False if unknown or already started
        """
        location = self.find_job(job_id)
        if location is None:
            return False

        now = now or self._clock()
        if self.get_batch(location).start_time <= now:
            logger.warning(f"Cannot cancel job {job_id}: its batch has already started")
            return False

        self.remove_job(location.machine_index, location.batch_index, location.item_index)
        return True

    def get_summary(self) -> dict:
        """Get summary of the current schedule."""
        return {
            "placement": self.placement.name,
            "machines": len(self.machines),
            "batches": sum(len(m.schedule) for m in self.machines),
            "jobs": sum(m.job_count for m in self.machines),
            "completion_times": {
                m.name: m.completion_time.isoformat() for m in self.machines
            },
        }

    def to_dict(self) -> dict:
        return {
            "placement": self.placement.name,
            "machines": [m.to_dict() for m in self.machines],
        }

    def __len__(self) -> int:
        return len(self.machines)

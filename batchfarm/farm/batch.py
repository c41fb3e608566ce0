"""Batches of compatible print jobs that share one machine run.

Every job in a batch finishes when the slowest one does, so a batch's
print duration is the maximum of its jobs' durations and its completion
time is its start time plus that duration.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from batchfarm.errors import CapacityExceededError, IncompatibleFamilyError, IndexOutOfRangeError
from batchfarm.farm.models import Dimensions, JobFamily, PrintJob, fits
from batchfarm.utils import get_logger

logger = get_logger("farm.batch")


class Batch:
    """
    An ordered group of jobs printed together on one machine.

    The batch family is unset until the first job is admitted and is
    cleared again when the last job is removed.
    """

    def __init__(self, capacity: Dimensions, start_time: datetime):
        self.capacity = capacity
        self.start_time = start_time
        self.items: List[PrintJob] = []
        self.print_duration = timedelta(0)
        self.family: Optional[JobFamily] = None
        self._occupied = Dimensions.zero()

    @property
    def occupied(self) -> Dimensions:
        """Combined footprint of all jobs in the batch."""
        return self._occupied

    @property
    def remaining(self) -> Dimensions:
        """Capacity left on each axis."""
        return self.capacity - self._occupied

    @property
    def is_empty(self) -> bool:
        return not self.items

    def is_compatible(self, family: JobFamily) -> bool:
        """Check if a job of `family` may join this batch."""
        return self.family is None or self.family.compatible_with(family)

    def can_fit(self, dims: Dimensions) -> bool:
        """Check if `dims` fits in the capacity left in this batch."""
        return fits(self._occupied + dims, self.capacity)

    def accepts(self, job: PrintJob) -> bool:
        """Check both family compatibility and remaining capacity."""
        return self.is_compatible(job.family) and self.can_fit(job.dims)

    def add(self, job: PrintJob) -> None:
        """
        Append a job to the batch.

        Raises:
            IncompatibleFamilyError: If the job's family differs from the batch family
            CapacityExceededError: If the job does not fit the remaining capacity
        """
        if not self.is_compatible(job.family):
            raise IncompatibleFamilyError(
                f"Job {job.job_id} family {job.family.name!r} does not match batch family {self.family.name!r}"
            )
        if not self.can_fit(job.dims):
            raise CapacityExceededError(
                f"Job {job.job_id} ({job.dims}) does not fit remaining capacity {self.remaining}"
            )

        if self.family is None:
            self.family = job.family
        self.items.append(job)
        self._occupied = self._occupied + job.dims
        self.print_duration = max(self.print_duration, job.print_duration)
        logger.debug(f"Batch now holds {len(self.items)} job(s), occupied {self._occupied}")

    def remove(self, index: int) -> PrintJob:
        """Remove and return the job at `index`."""
        if index < 0 or index >= len(self.items):
            raise IndexOutOfRangeError("Job", index, len(self.items))

        job = self.items.pop(index)
        self._recompute()
        return job

    def _recompute(self) -> None:
        occupied = Dimensions.zero()
        for item in self.items:
            occupied = occupied + item.dims
        self._occupied = occupied
        self.print_duration = max((item.print_duration for item in self.items), default=timedelta(0))
        if not self.items:
            self.family = None

    def est_completion_time(self) -> datetime:
        """Estimated time at which every job in the batch is done."""
        return self.start_time + self.print_duration

    def to_dict(self) -> dict:
        return {
            "family": self.family.to_dict() if self.family else None,
            "capacity": self.capacity.to_dict(),
            "occupied": self._occupied.to_dict(),
            "start_time": self.start_time.isoformat(),
            "print_duration_seconds": self.print_duration.total_seconds(),
            "est_completion_time": self.est_completion_time().isoformat(),
            "items": [item.to_dict() for item in self.items],
        }

    def __len__(self) -> int:
        return len(self.items)

    def __repr__(self) -> str:
        family = self.family.name if self.family else None
        return (f"Batch(jobs={len(self.items)}, family={family!r}, "
                f"occupied={self._occupied}, capacity={self.capacity})")

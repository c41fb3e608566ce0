"""A printer in the farm and its queue of batches."""

from collections import deque
from datetime import datetime
from typing import Any, Deque, Dict, Iterator, Optional

from batchfarm.farm.batch import Batch
from batchfarm.farm.models import Dimensions, PrintJob
from batchfarm.utils import get_logger, utc_now

logger = get_logger("farm.machine")


class Machine:
    """
    One printer with an ordered queue of batches.

    The queue always holds at least one batch, and each batch starts when
    the one before it is estimated to complete. Job placement is decided
    by the Farm; the machine only maintains its own queue.
    """

    def __init__(
        self,
        capacity: Dimensions,
        name: str = "Untitled",
        start_time: Optional[datetime] = None,
        config: Optional[Dict[str, str]] = None,
    ):
        self.name = name
        self.capacity = capacity
        self.is_running = False
        self.config: Dict[str, str] = config or {}
        self.schedule: Deque[Batch] = deque([Batch(capacity, start_time or utc_now())])

    @property
    def last_batch(self) -> Batch:
        return self.schedule[-1]

    @property
    def completion_time(self) -> datetime:
        """Time at which the whole queue is estimated to be done."""
        return self.last_batch.est_completion_time()

    @property
    def job_count(self) -> int:
        return sum(1 for _ in self.jobs())

    def jobs(self) -> Iterator[PrintJob]:
        """Iterate every scheduled job in queue order."""
        for batch in self.schedule:
            yield from batch.items

    def can_hold(self, dims: Dimensions) -> bool:
        """Check if a job of `dims` fits this machine at all."""
        return dims.fits_within(self.capacity)

    def open_batch(self) -> Batch:
        """Append an empty batch that starts when the current last batch completes."""
        batch = Batch(self.capacity, self.completion_time)
        self.schedule.append(batch)
        logger.info(f"Opened batch {len(self.schedule) - 1} on {self.name} starting {batch.start_time.isoformat()}")
        return batch

    def reflow(self) -> None:
        """Re-anchor each batch to the completion time of the batch before it."""
        previous: Optional[Batch] = None
        for batch in self.schedule:
            if previous is not None:
                batch.start_time = previous.est_completion_time()
            previous = batch

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "is_running": self.is_running,
            "capacity": self.capacity.to_dict(),
            "config": dict(self.config),
            "completion_time": self.completion_time.isoformat(),
            "schedule": [batch.to_dict() for batch in self.schedule],
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        default_capacity: Optional[Dimensions] = None,
        start_time: Optional[datetime] = None,
    ) -> "Machine":
        """Create an empty machine from a definition dictionary."""
        raw_capacity = data.get("capacity")
        if raw_capacity is None:
            if default_capacity is None:
                raise ValueError(f"Machine {data.get('name', 'Untitled')!r} has no capacity")
            capacity = default_capacity
        else:
            capacity = Dimensions.from_value(raw_capacity)

        return cls(
            capacity=capacity,
            name=data.get("name", "Untitled"),
            start_time=start_time,
            config={str(k): str(v) for k, v in data.get("config", {}).items()},
        )

    def __repr__(self) -> str:
        return f"Machine({self.name}: {self.capacity}, {len(self.schedule)} batch(es), {self.job_count} job(s))"

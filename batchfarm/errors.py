"""Exceptions raised by the batchfarm scheduling engine."""


class SchedulingError(Exception):
    """Base class for scheduling errors."""


class IncompatibleFamilyError(SchedulingError):
    """Job family does not match the batch family."""


class CapacityExceededError(SchedulingError):
    """Job does not fit in the remaining batch capacity."""


class JobTooLargeError(SchedulingError):
    """Job does not fit any machine, even in an empty batch."""

    def __init__(self, job, message: str = ""):
        self.job = job
        super().__init__(
            message or f"Job {job.job_id} with dims {job.dims} exceeds every machine's capacity"
        )


class NoMachinesError(SchedulingError):
    """Farm has no machines to place a job on."""


class PlacementError(SchedulingError):
    """Placement strategy chose a machine outside the candidates it was given."""


class IndexOutOfRangeError(SchedulingError, IndexError):
    """Positional removal with an invalid index."""

    def __init__(self, what: str, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"{what} index {index} out of range (size {length})")


class ServiceNotRunningError(SchedulingError):
    """Request sent to a farm service that is not running."""


class ConfigError(SchedulingError):
    """Farm or job definition could not be parsed."""

"""Value types for print farm scheduling.

Dimensions describe a bounding box (a job's footprint or a batch's
capacity), JobFamily groups jobs that can share a print run, and
PrintJob is one unit of work submitted to the farm.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Union
from uuid import uuid4

from batchfarm.utils import utc_now


@dataclass(frozen=True)
class Dimensions:
    """Axis lengths of a bounding box in millimetres."""

    x: int = 0
    y: int = 0
    z: int = 0

    def __post_init__(self):
        for axis in ("x", "y", "z"):
            value = getattr(self, axis)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Dimension {axis} must be an integer, got: {value!r}")
            if value < 0:
                raise ValueError(f"Dimension {axis} must be non-negative, got: {value}")

    def __add__(self, other: "Dimensions") -> "Dimensions":
        if not isinstance(other, Dimensions):
            return NotImplemented
        return Dimensions(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Dimensions") -> "Dimensions":
        if not isinstance(other, Dimensions):
            return NotImplemented
        return Dimensions(
            max(0, self.x - other.x),
            max(0, self.y - other.y),
            max(0, self.z - other.z),
        )

    def __iter__(self):
        return iter((self.x, self.y, self.z))

    def fits_within(self, capacity: "Dimensions") -> bool:
        """Check that every axis is within the capacity on that axis."""
        return self.x <= capacity.x and self.y <= capacity.y and self.z <= capacity.z

    @classmethod
    def zero(cls) -> "Dimensions":
        return cls(0, 0, 0)

    @classmethod
    def from_value(cls, value: Union["Dimensions", Sequence[int], Mapping[str, int]]) -> "Dimensions":
        """Create from a 3-sequence or a mapping with x/y/z keys."""
        if isinstance(value, Dimensions):
            return value
        if isinstance(value, Mapping):
            return cls(_axis(value["x"]), _axis(value["y"]), _axis(value["z"]))
        if isinstance(value, (str, bytes)):
            raise ValueError(f"Dimensions need a sequence of 3 numbers, got: {value!r}")
        if len(value) != 3:
            raise ValueError(f"Dimensions need exactly 3 values, got: {list(value)}")
        x, y, z = value
        return cls(_axis(x), _axis(y), _axis(z))

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "z": self.z}

    def __str__(self) -> str:
        return f"{self.x}x{self.y}x{self.z}"


def _axis(value: Any) -> int:
    """Convert a whole-number axis length, rejecting fractions and text."""
    if isinstance(value, bool) or isinstance(value, (str, bytes)):
        raise ValueError(f"Axis length must be a number, got: {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Axis length must be a whole number, got: {value}")
        return int(value)
    if not isinstance(value, int):
        raise ValueError(f"Axis length must be a number, got: {value!r}")
    return value

def fits(required: Dimensions, capacity: Dimensions) -> bool:
    """Check whether `required` fits within `capacity` on all three axes."""
    return required.fits_within(capacity)


@dataclass(frozen=True)
class JobFamily:
    """
    Process profile shared by jobs that can print together.

    Only `config` takes part in compatibility; `name` is a label. The
    config is copied into a read-only mapping on creation.
    """

    name: str
    config: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "config", MappingProxyType(dict(self.config)))

    def __hash__(self) -> int:
        return hash((self.name, frozenset(self.config.items())))

    def compatible_with(self, other: "JobFamily") -> bool:
        """Check if two families have exactly the same configuration."""
        return dict(self.config) == dict(other.config)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "config": dict(self.config)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobFamily":
        config = data.get("config", {})
        return cls(name=data.get("name", "Untitled"), config={str(k): str(v) for k, v in config.items()})


def compatible(a: JobFamily, b: JobFamily) -> bool:
    """Structural equality of two families' configuration mappings."""
    return a.compatible_with(b)


@dataclass(frozen=True)
class PrintJob:
    """A print job that can be admitted into a batch."""

    dims: Dimensions
    due_date: datetime
    print_duration: timedelta
    family: JobFamily
    name: str = ""
    job_id: str = field(default_factory=lambda: str(uuid4())[:8])

    def __post_init__(self):
        if self.print_duration < timedelta(0):
            raise ValueError(f"Print duration must be non-negative, got: {self.print_duration}")

    @classmethod
    def create(
        cls,
        dims: Dimensions,
        time_till_due: timedelta,
        print_duration: timedelta,
        family: JobFamily,
        name: str = "",
        now: Optional[datetime] = None,
        job_id: Optional[str] = None,
    ) -> "PrintJob":
        """
        Create a job due `time_till_due` from now.

        Args:
            dims: Bounding box of the part
            time_till_due: Offset from now to the due date
            print_duration: Estimated time to print the part
            family: Process family of the job
            name: Optional job name
            now: Reference time (defaults to current UTC time)
            job_id: Optional explicit identifier

        Returns:
            The created PrintJob
        """
        now = now or utc_now()
        kwargs = {"job_id": job_id} if job_id else {}
        return cls(
            dims=dims,
            due_date=now + time_till_due,
            print_duration=print_duration,
            family=family,
            name=name,
            **kwargs,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "job_id": self.job_id,
            "name": self.name,
            "dims": self.dims.to_dict(),
            "due_date": self.due_date.isoformat(),
            "print_duration_seconds": self.print_duration.total_seconds(),
            "family": self.family.to_dict(),
        }

    def __str__(self) -> str:
        return f"PrintJob({self.job_id}: {self.name or 'unnamed'}, {self.dims}, {self.family.name})"

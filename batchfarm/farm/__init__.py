"""Print farm scheduling for batchfarm.

Admits print jobs into batches across a fleet of machines:
- Dimensions, job families and print jobs
- Batches with capacity and completion-time tracking
- Machines with ordered batch queues
- Farm-wide first-fit admission with pluggable placement
- Serialized async access for concurrent callers
"""

from batchfarm.farm.models import (
    Dimensions,
    JobFamily,
    PrintJob,
    compatible,
    fits,
)

from batchfarm.farm.batch import Batch

from batchfarm.farm.machine import Machine

from batchfarm.farm.placement import (
    PlacementPolicy,
    PlacementStrategy,
    FirstMachinePlacement,
    LeastLoadedPlacement,
    EarliestAvailablePlacement,
    RoundRobinPlacement,
    get_placement_strategy,
)

from batchfarm.farm.farm import (
    Farm,
    JobLocation,
)

from batchfarm.farm.service import (
    FarmService,
    ServiceStatus,
)

__all__ = [
    # Models
    "Dimensions",
    "JobFamily",
    "PrintJob",
    "compatible",
    "fits",
    # Batches and machines
    "Batch",
    "Machine",
    # Placement
    "PlacementPolicy",
    "PlacementStrategy",
    "FirstMachinePlacement",
    "LeastLoadedPlacement",
    "EarliestAvailablePlacement",
    "RoundRobinPlacement",
    "get_placement_strategy",
    # Farm
    "Farm",
    "JobLocation",
    # Service
    "FarmService",
    "ServiceStatus",
]

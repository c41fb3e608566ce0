"""Placement strategies for opening new batches.

When no existing batch accepts a job, the farm opens a new batch at the
end of one machine's queue. Which machine is a policy decision made here.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Sequence, Union

from batchfarm.farm.machine import Machine


class PlacementPolicy(str, Enum):
    """Built-in policies for choosing the machine that gets a new batch."""
    FIRST = "first"  # First capable machine in farm order
    LEAST_LOADED = "least_loaded"  # Fewest scheduled jobs
    EARLIEST_AVAILABLE = "earliest_available"  # Queue completes soonest
    ROUND_ROBIN = "round_robin"  # Rotate through capable machines


class PlacementStrategy(ABC):
    """Chooses a machine among those able to hold a job."""

    policy: PlacementPolicy

    @property
    def name(self) -> str:
        policy = getattr(self, "policy", None)
        return policy.value if policy else type(self).__name__

    @abstractmethod
    def choose(self, candidates: Sequence[Machine]) -> Machine:
        """
        Pick one machine.

        Args:
            candidates: Non-empty list of capable machines, in farm order

        Returns:
            The machine that receives the new batch
        """


class FirstMachinePlacement(PlacementStrategy):
    policy = PlacementPolicy.FIRST

    def choose(self, candidates: Sequence[Machine]) -> Machine:
        return candidates[0]


class LeastLoadedPlacement(PlacementStrategy):
    policy = PlacementPolicy.LEAST_LOADED

    def choose(self, candidates: Sequence[Machine]) -> Machine:
        # min() keeps the first of equal keys, so ties go to farm order
        return min(candidates, key=lambda m: m.job_count)


class EarliestAvailablePlacement(PlacementStrategy):
    policy = PlacementPolicy.EARLIEST_AVAILABLE

    def choose(self, candidates: Sequence[Machine]) -> Machine:
        return min(candidates, key=lambda m: m.completion_time)


class RoundRobinPlacement(PlacementStrategy):
    """Cycles through candidates across successive calls."""

    policy = PlacementPolicy.ROUND_ROBIN

    def __init__(self):
        self._turn = 0

    def choose(self, candidates: Sequence[Machine]) -> Machine:
        machine = candidates[self._turn % len(candidates)]
        self._turn += 1
        return machine


_STRATEGIES = {
    PlacementPolicy.FIRST: FirstMachinePlacement,
    PlacementPolicy.LEAST_LOADED: LeastLoadedPlacement,
    PlacementPolicy.EARLIEST_AVAILABLE: EarliestAvailablePlacement,
    PlacementPolicy.ROUND_ROBIN: RoundRobinPlacement,
}


def get_placement_strategy(policy: Union[PlacementPolicy, str, PlacementStrategy]) -> PlacementStrategy:
    """Build a strategy for a policy name, or pass a strategy instance through."""
    if isinstance(policy, PlacementStrategy):
        return policy
    return _STRATEGIES[PlacementPolicy(policy)]()

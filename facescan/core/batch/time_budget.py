"""
Per-tick wall-clock budget.

A tick runs inside a function with a hard timeout. The budget is a soft
deadline checked at checkpoints (before the batch fetch and before each
comparison); in-flight calls are never cancelled.

Dependencies: time
System role: Time-budget policy for the batch orchestrator
"""

import time
from dataclasses import dataclass, field
from typing import Callable

from facescan.configs.engine import EngineSettings


@dataclass
class TimeBudget:
    """
    Soft deadline for one tick.

    Attributes:
        budget_seconds: Wall-clock seconds the tick may spend
        degrade_fraction: Elapsed share after which fetched batches shrink
        abort_fraction: Elapsed share after which no new work starts
        clock: Monotonic time source (injectable for tests)
    """

    budget_seconds: float
    degrade_fraction: float = 0.5
    abort_fraction: float = 0.85
    clock: Callable[[], float] = time.monotonic
    started_at: float = field(init=False)

    def __post_init__(self) -> None:
        if self.budget_seconds <= 0:
            raise ValueError("budget_seconds must be positive")
        self.started_at = self.clock()

    @classmethod
    def from_settings(
        cls,
        settings: EngineSettings,
        remaining_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> "TimeBudget":
        """
        Build a budget from engine settings.

        When the runtime reports how much time is left (Lambda context), the
        budget never exceeds that share of the remaining time.
        """
        budget = settings.budget_seconds
        if remaining_seconds is not None:
            budget = min(budget, remaining_seconds * settings.budget_fraction)
        return cls(
            budget_seconds=max(budget, 0.001),
            degrade_fraction=settings.degrade_fraction,
            abort_fraction=settings.abort_fraction,
            clock=clock,
        )

    @property
    def elapsed(self) -> float:
        return self.clock() - self.started_at

    @property
    def remaining(self) -> float:
        return max(self.budget_seconds - self.elapsed, 0.0)

    @property
    def used_fraction(self) -> float:
        return self.elapsed / self.budget_seconds

    def should_stop(self) -> bool:
        """True once no new comparison or fetch may start."""
        return self.used_fraction >= self.abort_fraction

    def plan_batch(self, requested: int, remaining_items: int) -> int:
        """
        Number of items to fetch for this tick.

        Shrinks the batch instead of bailing out when the tick already
        spent a large share of its budget before fetching.
        """
        count = min(requested, remaining_items)
        if count <= 0:
            return 0
        if self.used_fraction >= self.degrade_fraction:
            count = max(1, count // 2)
        return count

"""
Test suite for TimeBudget.

System role: Verification of the per-tick soft deadline policy
"""

import pytest

from facescan.configs.engine import EngineSettings
from facescan.core.batch.time_budget import TimeBudget
from tests.fakes import FakeClock


@pytest.fixture
def budget(clock: FakeClock) -> TimeBudget:
    """Provide a 10 second budget on the fake clock."""
    return TimeBudget(budget_seconds=10.0, degrade_fraction=0.5, abort_fraction=0.85, clock=clock)


class TestTimeBudget:
    """Test elapsed time tracking and checkpoints."""

    def test_fresh_budget(self, budget):
        """Test that nothing is spent at start."""
        assert budget.elapsed == 0
        assert budget.remaining == 10.0
        assert budget.should_stop() is False

    def test_should_stop_at_abort_fraction(self, budget, clock):
        """Test that work stops once 85% of the budget is used."""
        clock.advance(8.4)
        assert budget.should_stop() is False

        clock.advance(0.1)
        assert budget.should_stop() is True

    def test_remaining_never_negative(self, budget, clock):
        """Test that overrun budgets report zero remaining."""
        clock.advance(30)
        assert budget.remaining == 0.0

    def test_rejects_non_positive_budget(self, clock):
        """Test that a zero budget is a configuration error."""
        with pytest.raises(ValueError):
            TimeBudget(budget_seconds=0, clock=clock)


class TestPlanBatch:
    """Test plan_batch()."""

    def test_full_batch_when_fresh(self, budget):
        assert budget.plan_batch(requested=10, remaining_items=100) == 10

    def test_capped_by_remaining_items(self, budget):
        assert budget.plan_batch(requested=10, remaining_items=3) == 3

    def test_halved_after_degrade_fraction(self, budget, clock):
        """Test that late fetches shrink instead of bailing out."""
        clock.advance(5.0)
        assert budget.plan_batch(requested=10, remaining_items=100) == 5

    def test_never_below_one(self, budget, clock):
        clock.advance(6.0)
        assert budget.plan_batch(requested=1, remaining_items=100) == 1

    def test_zero_when_nothing_left(self, budget):
        assert budget.plan_batch(requested=10, remaining_items=0) == 0


class TestFromSettings:
    """Test TimeBudget.from_settings()."""

    def test_uses_configured_budget(self, clock):
        """Test that the budget is a share of the runtime ceiling."""
        settings = EngineSettings(max_execution_seconds=20.0, budget_fraction=0.5)

        budget = TimeBudget.from_settings(settings, clock=clock)

        assert budget.budget_seconds == 10.0

    def test_bounded_by_remaining_invocation_time(self, clock):
        """Test that a nearly expired invocation gets a smaller budget."""
        settings = EngineSettings(max_execution_seconds=20.0, budget_fraction=0.5)

        budget = TimeBudget.from_settings(settings, remaining_seconds=4.0, clock=clock)

        assert budget.budget_seconds == 2.0

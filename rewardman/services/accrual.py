"""Credit accrual - turns point and visit progress into credits.

Pure functions over an already-locked Balance; persisting is the caller's job.
"""

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal

from rewardman.models import Balance, EarningMode, Merchant


@dataclass(frozen=True)
class CreditsEarned:
    """Credits earned by one transaction, per pool."""

    points: int = 0
    visits: int = 0

    @property
    def total(self) -> int:
        return self.points + self.visits

    def for_mode(self, mode: str) -> int:
        if mode == EarningMode.POINTS:
            return self.points
        if mode == EarningMode.VISITS:
            return self.visits
        raise ValueError(f"Unknown earning mode: {mode!r}")


def points_for_amount(amount: Decimal, points_per_currency: int) -> int:
    """floor(amount * points_per_currency)."""
    points = (Decimal(amount) * points_per_currency).to_integral_value(rounding=ROUND_FLOOR)
    return max(0, int(points))


def _convert(progress: int, threshold: int) -> tuple[int, int]:
    """Split progress into (credits, remainder). Threshold <= 0 never credits."""
    if threshold <= 0:
        return 0, progress
    return divmod(progress, threshold)


def accrue(balance: Balance, merchant: Merchant, points: int) -> CreditsEarned:
    """
    Apply one visit worth `points` to balance.

    Adds points and one visit, then converts every full points_threshold into
    a points credit and every full visit_threshold into a visit credit.
    Leftover progress carries over.
    """
    balance.current_points += points
    balance.total_points_earned += points
    balance.current_visits += 1
    balance.total_visits += 1

    points_credits, balance.current_points = _convert(
        balance.current_points, merchant.points_threshold
    )
    visit_credits, balance.current_visits = _convert(
        balance.current_visits, merchant.visit_threshold
    )

    balance.points_credits += points_credits
    balance.visit_credits += visit_credits
    balance.total_credits_earned += points_credits + visit_credits

    return CreditsEarned(points=points_credits, visits=visit_credits)

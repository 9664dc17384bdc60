"""
Pricing calculator.

Monthly base price is a flat tier price when the asset count is exactly the
tier size, and a per-asset rate for every other count (including smaller
ones). The monthly total is multiplied by the duration, a duration discount
is applied, and the result never goes below the floor.

    assets == 5  -> $50 / month
    assets != 5  -> $10 * assets / month
    >= 12 months -> 20% off
    >= 6 months  -> 10% off
    floor        -> $0.50
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from .exceptions import InvalidInput

CENT = Decimal("0.01")
PRICE_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class PricingPolicy:
    tier_size: int = 5
    tier_price: Decimal = Decimal("50")
    per_asset_rate: Decimal = Decimal("10")
    floor: Decimal = Decimal("0.50")
    # (minimum months, discount) checked in order
    discounts: tuple[tuple[int, Decimal], ...] = (
        (12, Decimal("0.20")),
        (6, Decimal("0.10")),
    )

    def discount_rate(self, duration_months: int) -> Decimal:
        for min_months, rate in self.discounts:
            if duration_months >= min_months:
                return rate
        return Decimal("0")

    def monthly_base(self, asset_count: int) -> Decimal:
        if asset_count == self.tier_size:
            return self.tier_price
        return self.per_asset_rate * asset_count

    def compute_price(self, asset_count: int, duration_months: int) -> Decimal:
        _require_positive_int("asset_count", asset_count)
        _require_positive_int("duration_months", duration_months)

        total = self.monthly_base(asset_count) * duration_months
        discounted = total * (1 - self.discount_rate(duration_months))
        return max(discounted, self.floor).quantize(CENT, rounding=ROUND_HALF_UP)


DEFAULT_POLICY = PricingPolicy()


def _require_positive_int(field: str, value: int) -> None:
    # bool is an int subclass; True must not pass as one asset
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidInput(f"{field} must be a positive integer")


def compute_price(asset_count: int, duration_months: int) -> Decimal:
    """Price in dollars for the default policy."""
    return DEFAULT_POLICY.compute_price(asset_count, duration_months)


def discount_rate(duration_months: int) -> Decimal:
    return DEFAULT_POLICY.discount_rate(duration_months)


def prices_match(expected: Decimal, supplied: Decimal) -> bool:
    """Two-decimal comparison used for client and metadata prices."""
    return abs(expected - supplied) <= PRICE_TOLERANCE


def to_minor_units(price: Decimal) -> int:
    """Convert dollars to integer cents, rounding half up."""
    return int((price * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

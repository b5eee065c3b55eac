import math


def whole(amount: float) -> int:
    """
    Round half-up to the nearest whole currency unit.

    Python's round() is banker's rounding; cost tables are reconciled
    against half-up figures, so every monetary step goes through here.
    """
    return int(math.floor(amount + 0.5))


def safe_div(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    return numerator / denominator


def fmt_money(amount: float) -> str:
    """Short display form used in explanatory notes: $1.2M / $845,000."""
    if amount == 0:
        return "$0"
    if abs(amount) >= 1_000_000:
        return f"${amount / 1_000_000:.1f}M"
    return f"${whole(amount):,}"

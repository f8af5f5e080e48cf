"""Capital deposit note figures"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

DEFAULT_YEARLY_DIV_ALLOCATION = 975


def parse_rate(rate) -> Decimal:
    """Parse a percentage given as text or number; raises ValueError when it is not one"""
    try:
        value = Decimal(str(rate).strip().rstrip("%"))
    except (InvalidOperation, AttributeError) as e:
        raise ValueError(f"Invalid interest rate: {rate!r}") from e
    if not value.is_finite() or value < 0:
        raise ValueError(f"Invalid interest rate: {rate!r}")
    return value


def calculate_maturity(amount: int, rate, term: int) -> int:
    """
    Simple-interest maturity value, rounded to a whole amount.

    amount * (1 + rate/100 * term), e.g. 100000 at 9.75% over 3 years -> 129250.
    """
    value = Decimal(amount) * (1 + parse_rate(rate) / 100 * term)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_rate(rate) -> str:
    """Normalise a rate for storage as text ("9.750" -> "9.75", "10.0" -> "10")"""
    return format(parse_rate(rate).normalize(), "f")

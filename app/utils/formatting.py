from decimal import Decimal
from typing import Union

Number = Union[int, float, Decimal]


def format_price(amount: Number, currency: str = "£") -> str:
    return f"{currency}{Decimal(str(amount)):,.2f}"


def format_rate(rate: Number) -> str:
    """0.15 -> "15%"."""
    return f"{float(rate) * 100:g}%"


def format_duration(minutes: int) -> str:
    minutes = max(int(minutes), 0)
    hours, rest = divmod(minutes, 60)
    if not hours:
        return "1 minute" if rest == 1 else f"{rest} minutes"

    text = "1 hour" if hours == 1 else f"{hours} hours"
    if rest:
        text += f" {rest} min"
    return text

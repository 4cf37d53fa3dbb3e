"""Conversions between whole tokens and wei."""

from decimal import Decimal
from typing import Union

from eth_utils import from_wei, to_wei


def parse_ether(value: Union[int, float, str, Decimal]) -> int:
    """Whole-token amount ("1.5", 100) → integer wei."""
    if isinstance(value, float):
        value = str(value)
    return int(to_wei(value, "ether"))


def format_ether(wei: int) -> str:
    """Integer wei → whole-token string."""
    return str(from_wei(int(wei), "ether"))

"""Integer helpers for AP Coin amounts.

All balances, stakes, prices and pools are whole AP coins (int). No float.
"""

from src.ap_common.errors import InvalidAmountError


def validate_amount(amount: int) -> None:
    """Reject anything that is not a strictly positive int."""
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmountError(amount)


def coins_to_display(coins: int) -> str:
    """Format coins for humans: 1500 -> '1,500 AP', -20 -> '-20 AP'."""
    return f"{coins:,} AP"


def apply_bps_ceil(value: int, bps: int) -> int:
    """ceil(value * bps / 10000). Used where the platform must never undercharge."""
    if value == 0 or bps == 0:
        return 0
    return (value * bps + 9999) // 10000


def apply_bps_floor(value: int, bps: int) -> int:
    """floor(value * bps / 10000). Used for payouts so coins are never minted."""
    return (value * bps) // 10000

"""Tests for ap_common.coins: integer AP coin helpers."""

import pytest

from src.ap_common.coins import (
    apply_bps_ceil,
    apply_bps_floor,
    coins_to_display,
    validate_amount,
)
from src.ap_common.errors import InvalidAmountError


class TestValidateAmount:
    @pytest.mark.parametrize("amount", [1, 15, 1_000_000])
    def test_positive_ints_pass(self, amount: int) -> None:
        validate_amount(amount)

    @pytest.mark.parametrize("amount", [0, -1, -500])
    def test_zero_and_negative_rejected(self, amount: int) -> None:
        with pytest.raises(InvalidAmountError) as exc:
            validate_amount(amount)
        assert exc.value.code == 2003
        assert exc.value.details == {"amount": amount}

    @pytest.mark.parametrize("amount", [1.5, "10", None, True])
    def test_non_int_rejected(self, amount: object) -> None:
        with pytest.raises(InvalidAmountError):
            validate_amount(amount)  # type: ignore[arg-type]


class TestDisplay:
    def test_thousands_separator(self) -> None:
        assert coins_to_display(1500) == "1,500 AP"

    def test_negative(self) -> None:
        assert coins_to_display(-20) == "-20 AP"


class TestBps:
    def test_ceil_rounds_up(self) -> None:
        # 101 * 5% = 5.05 -> 6
        assert apply_bps_ceil(101, 500) == 6

    def test_ceil_exact(self) -> None:
        assert apply_bps_ceil(200, 500) == 10

    def test_ceil_zero_inputs(self) -> None:
        assert apply_bps_ceil(0, 500) == 0
        assert apply_bps_ceil(1000, 0) == 0

    def test_floor_rounds_down(self) -> None:
        # 11 * 50% = 5.5 -> 5
        assert apply_bps_floor(11, 5000) == 5

    def test_floor_full(self) -> None:
        assert apply_bps_floor(100, 10000) == 100

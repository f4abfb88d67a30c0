"""Tests for ap_scenario.domain.pools.compute_pools."""

from src.ap_scenario.domain.models import Prediction
from src.ap_scenario.domain.pools import compute_pools


def _p(user: str, side: str, amount: int) -> Prediction:
    return Prediction(id=f"PRD-{user}", scenario_id="SCN-1", user_id=user, side=side, amount=amount)


class TestComputePools:
    def test_empty(self) -> None:
        pools = compute_pools([])
        assert (pools.yes_pool, pools.no_pool, pools.total_pool, pools.participant_count) == (
            0, 0, 0, 0,
        )

    def test_sums_stakes_per_side(self) -> None:
        pools = compute_pools([_p("a", "YES", 100), _p("b", "NO", 40), _p("c", "YES", 10)])
        assert pools.yes_pool == 110
        assert pools.no_pool == 40
        assert pools.total_pool == 150
        assert pools.participant_count == 3

    def test_all_zero_stakes_count_votes(self) -> None:
        pools = compute_pools([_p("a", "YES", 0), _p("b", "YES", 0), _p("c", "NO", 0)])
        assert (pools.yes_pool, pools.no_pool, pools.total_pool) == (2, 1, 3)

    def test_mixed_zero_and_staked_ignores_zero_rows(self) -> None:
        pools = compute_pools([_p("a", "YES", 0), _p("b", "NO", 25)])
        assert (pools.yes_pool, pools.no_pool) == (0, 25)
        assert pools.participant_count == 2

    def test_total_is_always_sum_of_sides(self) -> None:
        rows = [_p(str(i), "YES" if i % 3 else "NO", i * 7) for i in range(1, 30)]
        pools = compute_pools(rows)
        assert pools.total_pool == pools.yes_pool + pools.no_pool

    def test_idempotent(self) -> None:
        rows = [_p("a", "YES", 5), _p("b", "NO", 9)]
        assert compute_pools(rows) == compute_pools(rows)

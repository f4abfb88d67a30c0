"""Pool recomputation from the raw set of predictions."""

from collections.abc import Iterable

from src.ap_common.enums import PredictionSide
from src.ap_scenario.domain.models import PoolSnapshot, Prediction


def compute_pools(predictions: Iterable[Prediction]) -> PoolSnapshot:
    """Sum stakes per side.

    When every stake is zero the scenario predates staking, so each prediction
    counts as one vote instead. No predictions yields an all-zero snapshot.
    """
    rows = list(predictions)
    vote_only = all(p.amount == 0 for p in rows)

    yes_pool = 0
    no_pool = 0
    for p in rows:
        weight = 1 if vote_only else p.amount
        if p.side == PredictionSide.YES:
            yes_pool += weight
        elif p.side == PredictionSide.NO:
            no_pool += weight

    return PoolSnapshot(
        yes_pool=yes_pool,
        no_pool=no_pool,
        total_pool=yes_pool + no_pool,
        participant_count=len(rows),
    )

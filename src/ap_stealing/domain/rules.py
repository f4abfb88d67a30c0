"""Stealability of a scenario for one attempt.

A scenario is, from a would-be thief's point of view, exactly one of:

  Unprotected        -> the steal may proceed to pricing
  Shielded(until)    -> ScenarioShielded, with the time left
  NotHeldByTarget    -> the thief already holds it (SelfSteal)

plus the scenario-level rejection for anything no longer ACTIVE.
"""

from dataclasses import dataclass
from datetime import datetime

from src.ap_common.datetime_utils import seconds_until
from src.ap_common.enums import ScenarioStatus
from src.ap_common.errors import (
    ScenarioNotActiveError,
    ScenarioShieldedError,
    SelfStealError,
)
from src.ap_scenario.domain.models import Scenario


@dataclass(frozen=True)
class Unprotected:
    holder_id: str


@dataclass(frozen=True)
class Shielded:
    until: datetime
    remaining_seconds: int


@dataclass(frozen=True)
class NotHeldByTarget:
    holder_id: str


Stealability = Unprotected | Shielded | NotHeldByTarget


def classify(scenario: Scenario, thief_id: str, now: datetime) -> Stealability:
    holder = scenario.holder_id
    if thief_id == holder:
        return NotHeldByTarget(holder)
    until = scenario.protected_until
    if until is not None and until > now:
        return Shielded(until, seconds_until(until, now))
    return Unprotected(holder)


def assert_stealable(scenario: Scenario, thief_id: str, now: datetime) -> str:
    """Return the holder to steal from, or raise the violated precondition."""
    if scenario.status != ScenarioStatus.ACTIVE:
        raise ScenarioNotActiveError(scenario.id, scenario.status)

    state = classify(scenario, thief_id, now)
    match state:
        case Unprotected(holder_id=holder):
            return holder
        case Shielded(until=until, remaining_seconds=remaining):
            raise ScenarioShieldedError(scenario.id, until, remaining)
        case NotHeldByTarget():
            raise SelfStealError(scenario.id)
    raise AssertionError(f"unhandled stealability state: {state!r}")

"""Tests for ap_common.enums: values must match the DB CHECK constraints."""

from src.ap_common.enums import (
    PredictionSide,
    ScenarioStatus,
    ShieldTier,
    TransactionType,
    UserRole,
)


class TestAllEnumsAreStr:
    def test_transaction_type_is_str(self) -> None:
        assert isinstance(TransactionType.STEAL, str)
        assert TransactionType.STEAL == "STEAL"

    def test_shield_tier_values_are_lowercase(self) -> None:
        assert [t.value for t in ShieldTier] == ["basic", "premium", "ultimate"]


class TestValues:
    def test_transaction_types(self) -> None:
        assert {t.value for t in TransactionType} == {
            "PURCHASE", "SALE", "WIN", "LOSS", "REWARD",
            "STEAL", "STEAL_REFUND", "STEAL_COMPENSATION", "SHIELD_PURCHASE",
            "PREDICTION_STAKE", "ADMIN_ADJUSTMENT",
        }

    def test_scenario_status(self) -> None:
        assert {s.value for s in ScenarioStatus} == {"ACTIVE", "RESOLVED", "CANCELLED"}

    def test_prediction_side(self) -> None:
        assert {s.value for s in PredictionSide} == {"YES", "NO"}

    def test_roles(self) -> None:
        assert {r.value for r in UserRole} == {
            "USER", "STAFF", "MODERATOR", "ADMIN", "SUPER_ADMIN",
        }

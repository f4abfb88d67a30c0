"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class UserRole(str, Enum):
    USER = "USER"
    STAFF = "STAFF"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class ScenarioStatus(str, Enum):
    ACTIVE = "ACTIVE"
    RESOLVED = "RESOLVED"
    CANCELLED = "CANCELLED"


class PredictionSide(str, Enum):
    YES = "YES"
    NO = "NO"


class TransactionType(str, Enum):
    # Shop
    PURCHASE = "PURCHASE"
    SALE = "SALE"
    # Resolution (written by the resolution process)
    WIN = "WIN"
    LOSS = "LOSS"
    REWARD = "REWARD"
    # Stealing (thief side / former holder side)
    STEAL = "STEAL"
    STEAL_REFUND = "STEAL_REFUND"
    STEAL_COMPENSATION = "STEAL_COMPENSATION"
    SHIELD_PURCHASE = "SHIELD_PURCHASE"
    # Predictions
    PREDICTION_STAKE = "PREDICTION_STAKE"
    # Back office
    ADMIN_ADJUSTMENT = "ADMIN_ADJUSTMENT"


class ShieldTier(str, Enum):
    BASIC = "basic"
    PREMIUM = "premium"
    ULTIMATE = "ultimate"

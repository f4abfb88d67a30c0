"""Tests for ap_gateway request/response schemas."""

import uuid

import pytest
from pydantic import ValidationError

from src.ap_common.enums import UserRole
from src.ap_gateway.user.db_models import UserModel
from src.ap_gateway.user.schemas import RegisterRequest, UserInfo


class TestRegisterRequest:
    def test_email_is_lowercased(self) -> None:
        req = RegisterRequest(username="alice_1", email="Alice@Example.COM", password="secret123")
        assert req.email == "alice@example.com"

    @pytest.mark.parametrize("password", ["12345678", "abcdefgh", "short1"])
    def test_weak_passwords_rejected(self, password: str) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(username="alice_1", email="alice@example.com", password=password)

    def test_username_charset(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(username="alice-1", email="alice@example.com", password="secret123")


def test_user_info_from_model() -> None:
    user = UserModel()
    user.id = uuid.UUID("00000000-0000-0000-0000-000000000007")
    user.username = "alice"
    user.email = "alice@example.com"
    user.role = "ADMIN"
    user.level = 3
    user.ap_coins = 1250

    info = UserInfo.from_model(user)

    assert info.user_id == "00000000-0000-0000-0000-000000000007"
    assert info.role is UserRole.ADMIN
    assert info.ap_coins == 1250

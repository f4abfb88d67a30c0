"""Unit tests for password hashing utilities."""

from src.ap_gateway.auth.password import hash_password, verify_password


def test_hash_is_not_plain():
    hashed = hash_password("Secret123")
    assert hashed != "Secret123"
    assert hashed.startswith("$2")


def test_verify_correct_password():
    assert verify_password("Secret123", hash_password("Secret123")) is True


def test_verify_wrong_password():
    assert verify_password("Wrong999", hash_password("Secret123")) is False


def test_malformed_hash_is_false():
    assert verify_password("Secret123", "not-a-bcrypt-hash") is False

import pytest

from ryo.core.exceptions import ValidationError
from ryo.modules.user_management.services.username import (
    fallback_username, sanitize_and_validate_username, sanitize_username, validate_username,
)


@pytest.mark.parametrize("raw, expected", [
    ("Ryo Cat", "ryocat"),
    ("  Hello World!! ", "helloworld"),
    ("__neko.cat__", "neko.cat"),
    ("ÁLVARO", "lvaro"),
    ("abcdefghijklmn.opq", "abcdefghijklmn"),
    ("", ""),
    ("!!!", ""),
])
def test_sanitize_username(raw, expected):
    assert sanitize_username(raw) == expected


@pytest.mark.parametrize("raw", [
    "Ryo Cat", "abcdefghijklmn.opq", "-._a_._-", "x" * 40, "a.b-c_d", "..__--", "Mixed.CASE_name-01",
])
def test_sanitize_is_idempotent(raw):
    once = sanitize_username(raw)
    assert sanitize_username(once) == once


@pytest.mark.parametrize("username, message", [
    ("", "username cannot be empty"),
    ("ab", "username must be at least 3 characters"),
    ("a" * 16, "username must be at most 15 characters"),
    (".abc", "username cannot start or end with a separator (., _, -)"),
    ("abc-", "username cannot start or end with a separator (., _, -)"),
    ("ab c", "invalid character ' ' in username"),
    ("Abc", "invalid character 'A' in username"),
    ("admin", "username is reserved"),
    ("me.", "username cannot start or end with a separator (., _, -)"),
])
def test_validate_username_rejects(username, message):
    with pytest.raises(ValidationError) as exc:
        validate_username(username)
    assert exc.value.detail == message


@pytest.mark.parametrize("username", ["abc", "a" * 15, "neko.cat", "user-1234abcd", "a_b-c.d"])
def test_validate_username_accepts(username):
    validate_username(username)


def test_sanitize_and_validate_username():
    assert sanitize_and_validate_username("  Neko.Cat ") == "neko.cat"
    with pytest.raises(ValidationError):
        sanitize_and_validate_username("ROOT")


def test_fallback_username_uses_subject_prefix():
    assert fallback_username("1234567890abcdef") == "user-12345678"
    assert fallback_username("42") == "user-42"

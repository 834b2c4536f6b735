import pytest
from google.auth import exceptions as google_exceptions

from ryo.core.exceptions import InvalidToken, UpstreamError
from ryo.modules.auth.services import google_auth
from ryo.modules.auth.services.google_auth import GoogleIdentityVerifier, identity_from_claims

ISSUERS = ["accounts.google.com", "https://accounts.google.com"]


def _claims(**overrides):
    claims = {
        "iss": "https://accounts.google.com",
        "aud": "test-client-id",
        "sub": "1234567890",
        "email": "ryo@example.com",
        "email_verified": True,
        "name": "Ryo Cat",
        "picture": "https://lh3.googleusercontent.com/a/cat.png",
    }
    claims.update(overrides)
    return {k: v for k, v in claims.items() if v is not None}


@pytest.fixture
def google_tokens(monkeypatch):
    """Replace Google's token check; returns the list of (token, audience) calls"""
    calls = []
    state = {"payload": _claims(), "error": None}

    def fake_verify(raw_token, request, audience):
        calls.append((raw_token, audience))
        if state["error"] is not None:
            raise state["error"]
        return state["payload"]

    monkeypatch.setattr(google_auth.id_token, "verify_oauth2_token", fake_verify)
    return calls, state


@pytest.fixture
def verifier():
    return GoogleIdentityVerifier("test-client-id", ISSUERS)


def test_verify_returns_identity(verifier, google_tokens):
    calls, _ = google_tokens

    identity = verifier.verify("raw-token", "test-client-id")

    assert identity.sub == "1234567890"
    assert identity.email == "ryo@example.com"
    assert identity.email_verified is True
    assert identity.name == "Ryo Cat"
    assert identity.picture == "https://lh3.googleusercontent.com/a/cat.png"
    assert calls == [("raw-token", "test-client-id")]


def test_verify_defaults_to_client_id_audience(verifier, google_tokens):
    calls, _ = google_tokens
    verifier.verify("raw-token")
    assert calls == [("raw-token", "test-client-id")]


def test_verify_empty_token(verifier, google_tokens):
    calls, _ = google_tokens
    with pytest.raises(InvalidToken, match="cannot be empty"):
        verifier.verify("", "test-client-id")
    assert calls == []


def test_verify_rejects_bad_signature(verifier, google_tokens):
    _, state = google_tokens
    state["error"] = ValueError("Could not verify token signature.")
    with pytest.raises(InvalidToken, match="validation failed"):
        verifier.verify("raw-token", "test-client-id")


def test_verify_rejects_google_auth_error(verifier, google_tokens):
    _, state = google_tokens
    state["error"] = google_exceptions.GoogleAuthError("Token expired")
    with pytest.raises(InvalidToken):
        verifier.verify("raw-token", "test-client-id")


def test_verify_certificate_fetch_failure(verifier, google_tokens):
    _, state = google_tokens
    state["error"] = google_exceptions.TransportError("connection reset")
    with pytest.raises(UpstreamError) as exc:
        verifier.verify("raw-token", "test-client-id")
    assert exc.value.detail == "identity provider unavailable"
    assert exc.value.status_code == 502


@pytest.mark.parametrize("issuer", ["https://evil.example", "google.com", None])
def test_verify_rejects_unknown_issuer(verifier, google_tokens, issuer):
    _, state = google_tokens
    state["payload"] = _claims(iss=issuer)
    with pytest.raises(InvalidToken, match="unexpected issuer"):
        verifier.verify("raw-token", "test-client-id")


@pytest.mark.parametrize("overrides", [
    {"sub": None},
    {"sub": 1234567890},
    {"email": None},
    {"email": ["ryo@example.com"]},
    {"email_verified": None},
    {"email_verified": "true"},
    {"email_verified": 1},
    {"name": None},
    {"name": 7},
])
def test_verify_rejects_missing_or_mistyped_claims(verifier, google_tokens, overrides):
    _, state = google_tokens
    state["payload"] = _claims(**overrides)
    claim = next(iter(overrides))
    with pytest.raises(InvalidToken, match=f"{claim} claim is missing or invalid"):
        verifier.verify("raw-token", "test-client-id")


@pytest.mark.parametrize("picture", [None, 42, {"url": "x"}])
def test_non_string_picture_becomes_empty(picture):
    claims = _claims()
    claims["picture"] = picture
    assert identity_from_claims(claims).picture == ""


def test_unverified_email_is_still_an_identity():
    identity = identity_from_claims(_claims(email_verified=False))
    assert identity.email_verified is False

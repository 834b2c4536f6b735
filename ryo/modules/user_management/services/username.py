"""Username sanitizing and validation rules."""
import re

from ryo.core.exceptions import ValidationError

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 15
SEPARATORS = "._-"

_disallowed = re.compile(r"[^a-z0-9._-]+")
_allowed = re.compile(r"[a-z0-9._-]+")

RESERVED_USERNAMES = frozenset({"admin", "root", "support", "system", "api", "null", "me"})


def sanitize_username(raw: str) -> str:
    """Lowercase, drop disallowed characters, trim separators and truncate.

    Separators are trimmed again after truncation so that
    sanitize_username(sanitize_username(x)) == sanitize_username(x).
    """
    if not raw:
        return ""
    s = _disallowed.sub("", raw.lower())
    s = s.strip(SEPARATORS)
    return s[:USERNAME_MAX_LENGTH].strip(SEPARATORS)


def validate_username(username: str) -> None:
    if not username:
        raise ValidationError("username cannot be empty")
    if len(username) < USERNAME_MIN_LENGTH:
        raise ValidationError(f"username must be at least {USERNAME_MIN_LENGTH} characters")
    if len(username) > USERNAME_MAX_LENGTH:
        raise ValidationError(f"username must be at most {USERNAME_MAX_LENGTH} characters")
    if username[0] in SEPARATORS or username[-1] in SEPARATORS:
        raise ValidationError("username cannot start or end with a separator (., _, -)")
    if not _allowed.fullmatch(username):
        bad = next(c for c in username if not _allowed.fullmatch(c))
        raise ValidationError(f"invalid character '{bad}' in username")
    if username in RESERVED_USERNAMES:
        raise ValidationError("username is reserved")


def sanitize_and_validate_username(raw: str) -> str:
    s = sanitize_username(raw)
    validate_username(s)
    return s


def fallback_username(sub: str) -> str:
    return f"user-{sub[:8]}"

"""
Validators — Regex and rule-based validation for utility tokens and phone numbers.
"""
import re

from payless.config import get_settings

_WHITESPACE = re.compile(r"\s+")


def is_all_zeros(token: str | None) -> bool:
    """True for empty input or a token made only of zeros (spaces ignored)."""
    if not token:
        return True
    return bool(re.fullmatch(r"0+", _WHITESPACE.sub("", token)))


def is_valid_token(token: str | None, reject_all_zeros: bool | None = None) -> bool:
    """Validate a vended utility token: exactly 20 decimal digits once whitespace is removed.

    All-zero tokens are accepted unless ``reject_all_zeros`` is set, or, when it
    is left as None, unless ``REJECT_ALL_ZERO_TOKENS`` is enabled.
    """
    if not isinstance(token, str) or not token.strip():
        return False
    settings = get_settings()
    if reject_all_zeros is None:
        reject_all_zeros = settings.REJECT_ALL_ZERO_TOKENS
    if reject_all_zeros and is_all_zeros(token):
        return False
    cleaned = _WHITESPACE.sub("", token)
    return bool(re.fullmatch(rf"[0-9]{{{settings.TOKEN_LENGTH}}}", cleaned))


def format_token(token: str | None) -> str:
    """Group a valid token into blocks of four digits (e.g. '6003 6831 ...').
    Anything that is not a valid token is returned stripped and unchanged.
    """
    if not token:
        return ""
    if not is_valid_token(token, reject_all_zeros=False):
        return token.strip()
    cleaned = _WHITESPACE.sub("", token)
    return " ".join(cleaned[i:i + 4] for i in range(0, len(cleaned), 4))


def clean_phone_number(phone: str | None) -> str:
    if not phone:
        return ""
    return _WHITESPACE.sub("", phone)


def validate_phone_number(phone: str | None) -> bool:
    """Accept +<cc><n digits>, <cc><n digits> or 0<n digits> (whitespace ignored)."""
    cleaned = clean_phone_number(phone)
    if not cleaned:
        return False
    settings = get_settings()
    cc = re.escape(settings.PHONE_COUNTRY_CODE)
    n = settings.PHONE_SUBSCRIBER_DIGITS
    return bool(re.fullmatch(rf"(\+?{cc}|0)[0-9]{{{n}}}", cleaned))

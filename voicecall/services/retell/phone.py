"""Phone number helpers shared by the proxy and the call widget."""
import re

# Separators people type into phone numbers
_SEPARATORS = re.compile(r"[\s\-()]")
_NON_DIAL = re.compile(r"[^\d+]")
_NON_DIGIT = re.compile(r"\D")

MIN_DIGITS = 10


def normalize_phone_number(phone_number: str) -> str:
    """Strip spaces, dashes and parentheses: ``+1 (626) 463-8602`` -> ``+16264638602``."""
    return _SEPARATORS.sub("", phone_number)


def clean_phone_input(value: str) -> str:
    """Keep only digits and ``+`` from raw widget input."""
    return _NON_DIAL.sub("", value)


def is_valid_phone_number(phone_number: str) -> bool:
    """A dialable number starts with ``+`` and has at least ten digits."""
    digits = _NON_DIGIT.sub("", phone_number)
    return phone_number.startswith("+") and len(digits) >= MIN_DIGITS

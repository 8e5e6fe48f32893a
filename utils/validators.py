"""Input validation helpers."""

import re
from typing import Iterable, List, Tuple


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_email(value: str) -> bool:
    """Syntactic ``local@domain.tld`` check on the trimmed value."""
    if not isinstance(value, str):
        return False
    return bool(EMAIL_RE.match(value.strip()))


def normalize_email(value: str) -> str:
    return value.strip().lower()


def split_emails(values: Iterable[str]) -> Tuple[List[str], List[str]]:
    """Partition addresses into normalized valid ones and the invalid originals.

    Every malformed entry is reported, order preserved, duplicates kept.
    """
    valid: List[str] = []
    invalid: List[str] = []
    for value in values:
        if validate_email(value):
            valid.append(normalize_email(value))
        else:
            invalid.append(value)
    return valid, invalid


def validate_room_name(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())

"""
Entry identifiers for Guess The Child

Every person added to the slideshow gets a ULID-based id. ULIDs are unique
and sortable, but slide order comes from the roster, never from the id.
"""

import re

from ulid import ULID

ENTRY_PREFIX = "PRS-"

_ENTRY_ID_PATTERN = re.compile(r'^PRS-[0-9A-HJKMNP-TV-Z]{26}$')


def generate_entry_id() -> str:
    """Generate a new entry id with PRS- prefix.

    Returns:
        str: Id in format "PRS-<ULID>"
    """
    return f"{ENTRY_PREFIX}{ULID()}"


def is_valid_entry_id(entry_id: str) -> bool:
    """Check if an entry id is well formed.

    Args:
        entry_id: Id to validate

    Returns:
        bool: True if valid, False otherwise
    """
    if not isinstance(entry_id, str):
        return False
    return _ENTRY_ID_PATTERN.match(entry_id.upper()) is not None


def person_label(index: int) -> str:
    """Display label for the person at a zero-based roster index."""
    return f"Person {index + 1}"

"""Join Codes — short, human-typable codes identifying one community.

Invariants:
    - Every code has exactly the requested length
    - Every character belongs to JOIN_CODE_ALPHABET (uppercase, no 0/O/1/I/L)
    - Stateless: collision avoidance belongs to the caller (services/membership.py)

Design Decisions:
    - secrets.choice over random.choice: codes gate membership, so they should
      not be predictable from earlier codes
"""

import secrets

from twincord.core.domain_types import JoinCode

JOIN_CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
DEFAULT_CODE_LENGTH = 6


def generate_join_code(length: int = DEFAULT_CODE_LENGTH) -> JoinCode:
    """Draw `length` characters uniformly from the join code alphabet."""
    if length < 1:
        raise ValueError("join code length must be positive")
    return JoinCode("".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length)))


def is_valid_join_code(code: str, length: int | None = None) -> bool:
    """Check shape only; says nothing about whether a community holds it."""
    if not code:
        return False
    if length is not None and len(code) != length:
        return False
    return all(ch in JOIN_CODE_ALPHABET for ch in code)

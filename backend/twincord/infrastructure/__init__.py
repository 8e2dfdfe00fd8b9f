"""Infrastructure Layer — database sessions, change feeds, and logging setup.

Invariants:
    - Driver-level failures are mapped to core/errors.py types before leaving this layer

Design Decisions:
    - Store-specific capabilities (LISTEN/NOTIFY) live here so services stay dialect-agnostic
"""

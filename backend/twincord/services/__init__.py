"""Services Layer — membership admission, message log, and stats delivery.

Invariants:
    - Services take an AsyncSession (or a session factory) and own their commits
    - Failures surface as core/errors.py types; routes never translate errors

Design Decisions:
    - One service per component for locality
"""

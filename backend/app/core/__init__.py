"""Core Layer - pure policy logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from api/, infrastructure/, client/ or db/
    - All functions are pure and deterministic
"""

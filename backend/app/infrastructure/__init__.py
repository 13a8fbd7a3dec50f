"""Infrastructure Layer - database access, bootstrap, rate-limit counters and logging.

Invariants:
    - Infrastructure never imports from api/
    - Driver and storage exceptions mapped to core/errors.py types at this boundary
"""

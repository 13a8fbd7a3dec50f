"""Client Layer - storefront API client with credential attachment and session recovery.

Invariants:
    - Calling code never sets the Authorization header itself
    - Route protection is declared once (route_access.ROUTE_TABLE)
    - Nothing here imports from the server packages (api/, infrastructure/)
"""

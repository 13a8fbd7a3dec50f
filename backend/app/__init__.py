"""Storefront Application Package - gatekeeper, bootstrapper and API client.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""

"""Database Scripts - schema.sql and seeds.sql applied by the bootstrapper.

Invariants:
    - schema.sql creates every storefront table; seeds.sql only inserts rows
    - Both scripts may carry CREATE DATABASE / USE directives; the server-start
      bootstrap strips them, the maintenance command runs them verbatim
"""

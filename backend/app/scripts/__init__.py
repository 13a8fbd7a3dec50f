"""Operational entry points - one-shot maintenance commands run outside the server."""

"""Schemas - Pydantic response models for the endpoints this package owns."""

"""Domain layer — entity models, taxonomy seed data, and fuzzy matching.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""

"""Domain layer: scopes, layers, merge rules, and diagnostics.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""

"""Domain layer — records, graph types, and the pure graph builder.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, layout, or config.
"""

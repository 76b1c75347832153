"""Infrastructure layer — NetworkX adjacency over the built graph.

This layer depends on stdlib, the domain types, and NetworkX.
It must never import from services or config.
"""

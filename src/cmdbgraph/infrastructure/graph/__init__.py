from cmdbgraph.infrastructure.graph.engine import GraphEngine

__all__ = ["GraphEngine"]

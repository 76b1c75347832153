"""cmdbgraph — CMDB dependency graph, impact analysis and layered layout."""

__version__ = "0.1.0"

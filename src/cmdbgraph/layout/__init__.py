"""Layout layer — layered graph drawing in three testable phases.

ranking (cycle breaking + ranks) → ordering (crossing reduction)
→ coordinates (x/y). Depends on NetworkX and the layout config only.
"""

from cmdbgraph.layout.engine import LayoutResult, PositionedNode, layout

__all__ = ["LayoutResult", "PositionedNode", "layout"]

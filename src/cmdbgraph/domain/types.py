"""Classification enums for CMDB entities, graph nodes and edges."""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class Criticality(StrEnum):
    """Business criticality of a service, ordered Low < Medium < High < Critical."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def level(self) -> int:
        return _CRITICALITY_LEVELS[self]

    # str already defines ordering, so each comparison is overridden explicitly.
    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, Criticality):
            return NotImplemented
        return self.level < other.level

    def __le__(self, other: Any) -> bool:
        if not isinstance(other, Criticality):
            return NotImplemented
        return self.level <= other.level

    def __gt__(self, other: Any) -> bool:
        if not isinstance(other, Criticality):
            return NotImplemented
        return self.level > other.level

    def __ge__(self, other: Any) -> bool:
        if not isinstance(other, Criticality):
            return NotImplemented
        return self.level >= other.level


_CRITICALITY_LEVELS: dict[Criticality, int] = {
    Criticality.LOW: 0,
    Criticality.MEDIUM: 1,
    Criticality.HIGH: 2,
    Criticality.CRITICAL: 3,
}


class Environment(StrEnum):
    """Well-known CI environments. Records may carry other values."""

    PRODUCTION = "Production"
    STAGING = "Staging"
    DEVELOPMENT = "Development"
    TESTING = "Testing"
    DR = "DR"


class NodeKind(StrEnum):
    """Discriminator for graph nodes."""

    SERVICE = "service"
    CI = "ci"


class EdgeKind(StrEnum):
    """Semantics of a graph edge.

    Only ``SERVICE_USES_CI`` and ``CI_DEPENDS_ON`` take part in impact
    propagation. ``CI_RELATED`` covers descriptive CI relationships
    (ConnectsTo, HostedBy, ...) that are drawn but stay inert.
    """

    SERVICE_USES_CI = "service_uses_ci"
    CI_DEPENDS_ON = "ci_depends_on"
    CI_RELATED = "ci_related"


class LayoutDirection(StrEnum):
    """Rank axis of the layered layout."""

    TB = "TB"  # ranks stacked top to bottom
    LR = "LR"  # ranks placed left to right

"""Display hints for the rendering layer: colours and icon names.

Unknown values fall back to neutral grey and a generic icon.
"""

from __future__ import annotations

NEUTRAL = "#6b7280"

CRITICALITY_COLORS: dict[str, str] = {
    "Critical": "#ef4444",
    "High": "#f97316",
    "Medium": "#eab308",
    "Low": "#22c55e",
}

SERVICE_STATUS_COLORS: dict[str, str] = {
    "Active": "#22c55e",
    "Inactive": "#6b7280",
    "Planned": "#3b82f6",
    "Retired": "#ef4444",
}

ENVIRONMENT_COLORS: dict[str, str] = {
    "Production": "#ef4444",
    "Staging": "#f97316",
    "Development": "#22c55e",
    "Testing": "#3b82f6",
    "DR": "#8b5cf6",
}

CI_TYPE_COLORS: dict[str, str] = {
    "Server": "#3b82f6",
    "Virtual Machine": "#3b82f6",
    "Container": "#8b5cf6",
    "Database": "#22c55e",
    "Application": "#f97316",
    "Web Server": "#06b6d4",
    "API": "#ec4899",
    "Load Balancer": "#6366f1",
    "Firewall": "#ef4444",
    "Storage": "#64748b",
    "Cloud Service": "#0ea5e9",
    "SaaS Application": "#0ea5e9",
    "Kubernetes Cluster": "#8b5cf6",
    "Message Queue": "#a855f7",
    "Cache": "#eab308",
}

CI_TYPE_ICONS: dict[str, str] = {
    "Server": "server",
    "Virtual Machine": "laptop",
    "Container": "package",
    "Database": "database",
    "Application": "smartphone",
    "Web Server": "globe",
    "API": "plug",
    "Load Balancer": "scale",
    "Firewall": "shield",
    "Storage": "hard-drive",
    "Cloud Service": "cloud",
    "SaaS Application": "cloud-lightning",
    "Kubernetes Cluster": "cog",
    "Message Queue": "inbox",
    "Cache": "zap",
}
DEFAULT_CI_ICON = "package"
SERVICE_ICON = "building"

# Edge strokes.
CRITICAL_STROKE = "#ef4444"
IMPACTED_STROKE = "#f97316"
MAPPING_STROKE = "#94a3b8"
CI_LINK_STROKE = "#cbd5e1"


def color_for(palette: dict[str, str], value: str | None) -> str:
    if value is None:
        return NEUTRAL
    return palette.get(value, NEUTRAL)

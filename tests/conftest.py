"""Shared pytest fixtures and record factories for cmdbgraph tests."""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any

import pytest

from cmdbgraph.domain.records import (
    CiRelationship,
    CmdbSnapshot,
    ConfigurationItem,
    Service,
    ServiceCiMapping,
)
from cmdbgraph.services.telemetry import disable_telemetry


def make_service(service_id: int, **kwargs: Any) -> Service:
    defaults: dict[str, Any] = {"id": service_id, "name": f"Service {service_id}"}
    defaults.update(kwargs)
    return Service(**defaults)


def make_ci(ci_id: int, **kwargs: Any) -> ConfigurationItem:
    defaults: dict[str, Any] = {
        "id": ci_id,
        "name": f"CI-{ci_id}",
        "ci_type": "Server",
        "environment": "Production",
    }
    defaults.update(kwargs)
    return ConfigurationItem(**defaults)


def make_mapping(mapping_id: int, service_id: int, ci_id: int, **kwargs: Any) -> ServiceCiMapping:
    return ServiceCiMapping(id=mapping_id, service_id=service_id, ci_id=ci_id, **kwargs)


def make_relationship(
    rel_id: int, source: int, target: int, rel_type: str = "DependsOn", **kwargs: Any
) -> CiRelationship:
    return CiRelationship(
        id=rel_id, source_ci_id=source, target_ci_id=target, relationship_type=rel_type, **kwargs
    )


@pytest.fixture
def factories() -> dict[str, Callable[..., Any]]:
    """Record factories, for tests that assemble their own snapshots."""
    return {
        "service": make_service,
        "ci": make_ci,
        "mapping": make_mapping,
        "relationship": make_relationship,
    }


@pytest.fixture
def chain_snapshot() -> CmdbSnapshot:
    """S1 uses C1; C2 depends on C1; C3 depends on C2. C2 lives in Staging."""
    return CmdbSnapshot(
        services=(make_service(1),),
        cis=(
            make_ci(1),
            make_ci(2, environment="Staging", ci_type="Database"),
            make_ci(3, ci_type="Application"),
        ),
        mappings=(make_mapping(1, 1, 1),),
        relationships=(make_relationship(1, 2, 1), make_relationship(2, 3, 2)),
    )


@pytest.fixture
def cyclic_snapshot() -> CmdbSnapshot:
    """C1 and C2 depend on each other; S1 uses C2."""
    return CmdbSnapshot(
        services=(make_service(1),),
        cis=(make_ci(1), make_ci(2)),
        mappings=(make_mapping(1, 1, 2),),
        relationships=(make_relationship(1, 1, 2), make_relationship(2, 2, 1)),
    )


@pytest.fixture
def portal_snapshot() -> CmdbSnapshot:
    """A small estate: two services sharing a database, plus a descriptive link."""
    return CmdbSnapshot(
        services=(
            make_service(1, name="Customer Portal", criticality="Critical", owner="Sarah Johnson"),
            make_service(2, name="Mobile App Backend", criticality="High"),
        ),
        cis=(
            make_ci(1, name="WEB-PROD-01"),
            make_ci(2, name="API-PROD-01", ci_type="API"),
            make_ci(3, name="SQL-PROD-PRIMARY", ci_type="Database"),
            make_ci(4, name="LB-PROD-01", ci_type="Load Balancer"),
            make_ci(5, name="WEB-DEV-01", environment="Development"),
        ),
        mappings=(
            make_mapping(1, 1, 1, is_critical=True),
            make_mapping(2, 2, 2),
            make_mapping(3, 1, 5),
        ),
        relationships=(
            make_relationship(1, 1, 3),
            make_relationship(2, 2, 3),
            make_relationship(3, 4, 1, rel_type="ConnectsTo"),
        ),
    )


@pytest.fixture(autouse=True)
def _telemetry_off() -> Generator[None]:
    """Telemetry state lives in a ContextVar; reset it after every test."""
    yield
    disable_telemetry()

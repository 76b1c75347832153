"""CMDB entity records consumed read-only from the surrounding application.

Each model accepts both snake_case keys and the PascalCase keys returned by
the CMDB REST API (``ServiceId``, ``CiName``, ``IsCritical``, ...). Missing
optional fields fall back to the database defaults.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from cmdbgraph.domain.types import Criticality

_RECORD_CONFIG = {"frozen": True, "extra": "ignore"}


def _alias(*names: str) -> Any:
    return AliasChoices(*names)


class Service(BaseModel):
    """A business-facing capability."""

    model_config = _RECORD_CONFIG

    id: int = Field(validation_alias=_alias("id", "ServiceId"))
    name: str = Field(validation_alias=_alias("name", "ServiceName"))
    criticality: Criticality = Field(
        default=Criticality.MEDIUM, validation_alias=_alias("criticality", "Criticality")
    )
    status: str = Field(default="Active", validation_alias=_alias("status", "Status"))
    owner: str | None = Field(default=None, validation_alias=_alias("owner", "BusinessOwner"))
    technical_owner: str | None = Field(
        default=None, validation_alias=_alias("technical_owner", "TechnicalOwner")
    )
    description: str | None = Field(
        default=None, validation_alias=_alias("description", "Description")
    )
    sla: str | None = Field(default=None, validation_alias=_alias("sla", "SLA"))

    @field_validator("criticality", mode="before")
    @classmethod
    def _normalize_criticality(cls, value: Any) -> Any:
        if value is None or value == "":
            return Criticality.MEDIUM
        if isinstance(value, str):
            for member in Criticality:
                if member.value.lower() == value.strip().lower():
                    return member
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> Any:
        return "Active" if value is None else value


class ConfigurationItem(BaseModel):
    """An infrastructure or application component."""

    model_config = _RECORD_CONFIG

    id: int = Field(validation_alias=_alias("id", "CiId"))
    name: str = Field(validation_alias=_alias("name", "CiName"))
    ci_type: str = Field(validation_alias=_alias("ci_type", "type", "CiType"))
    environment: str = Field(
        default="Production", validation_alias=_alias("environment", "Environment")
    )
    status: str = Field(default="Active", validation_alias=_alias("status", "Status"))
    sub_type: str | None = Field(default=None, validation_alias=_alias("sub_type", "SubType"))
    location: str | None = Field(default=None, validation_alias=_alias("location", "Location"))
    owner: str | None = Field(default=None, validation_alias=_alias("owner", "Owner"))
    description: str | None = Field(
        default=None, validation_alias=_alias("description", "Description")
    )

    @field_validator("environment", mode="before")
    @classmethod
    def _default_environment(cls, value: Any) -> Any:
        return "Production" if value is None else value

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> Any:
        return "Active" if value is None else value


class ServiceCiMapping(BaseModel):
    """Directed "Service uses CI" relation."""

    model_config = _RECORD_CONFIG

    id: int = Field(validation_alias=_alias("id", "MappingId"))
    service_id: int = Field(validation_alias=_alias("service_id", "ServiceId"))
    ci_id: int = Field(validation_alias=_alias("ci_id", "CiId"))
    relationship_type: str = Field(
        default="Contains", validation_alias=_alias("relationship_type", "RelationshipType")
    )
    is_critical: bool = Field(default=False, validation_alias=_alias("is_critical", "IsCritical"))

    @field_validator("is_critical", mode="before")
    @classmethod
    def _null_is_false(cls, value: Any) -> Any:
        return False if value is None else value


class CiRelationship(BaseModel):
    """Directed CI-to-CI relation; the source is the dependent side."""

    model_config = _RECORD_CONFIG

    id: int = Field(validation_alias=_alias("id", "RelationshipId"))
    source_ci_id: int = Field(validation_alias=_alias("source_ci_id", "SourceCiId"))
    target_ci_id: int = Field(validation_alias=_alias("target_ci_id", "TargetCiId"))
    relationship_type: str = Field(
        validation_alias=_alias("relationship_type", "RelationshipType")
    )
    is_active: bool = Field(default=True, validation_alias=_alias("is_active", "IsActive"))
    description: str | None = Field(
        default=None, validation_alias=_alias("description", "Description")
    )

    @field_validator("is_active", mode="before")
    @classmethod
    def _null_is_active(cls, value: Any) -> Any:
        return True if value is None else value


def _unwrap(payload: Any) -> list[Any]:
    """Accept a bare list or a ``{"data": [...]}`` API envelope."""
    if payload is None:
        return []
    if isinstance(payload, Mapping):
        return list(payload.get("data") or [])
    return list(payload)


class CmdbSnapshot(BaseModel):
    """The four record collections a graph is built from."""

    model_config = {"frozen": True}

    services: tuple[Service, ...] = ()
    cis: tuple[ConfigurationItem, ...] = ()
    mappings: tuple[ServiceCiMapping, ...] = ()
    relationships: tuple[CiRelationship, ...] = ()

    @classmethod
    def from_api(
        cls,
        services: Any = None,
        cis: Any = None,
        mappings: Any = None,
        relationships: Any = None,
    ) -> CmdbSnapshot:
        """Build a snapshot from raw API responses.

        Each argument may be a list of record dicts, a ``{"data": [...]}``
        envelope, or None. Validation errors propagate to the caller.
        """
        return cls.model_validate(
            {
                "services": _unwrap(services),
                "cis": _unwrap(cis),
                "mappings": _unwrap(mappings),
                "relationships": _unwrap(relationships),
            }
        )

    @property
    def relationship_count(self) -> int:
        return len(self.mappings) + len(self.relationships)

    def ci_types(self) -> list[str]:
        """Distinct CI types, sorted — the options of the type filter."""
        return _distinct_sorted(ci.ci_type for ci in self.cis)

    def environments(self) -> list[str]:
        """Distinct CI environments, sorted — the options of the environment filter."""
        return _distinct_sorted(ci.environment for ci in self.cis)


def _distinct_sorted(values: Iterable[str]) -> list[str]:
    return sorted(set(values))

"""Tests for CMDB record models and snapshot loading."""

import pytest
from pydantic import ValidationError

from cmdbgraph.domain.records import (
    CiRelationship,
    CmdbSnapshot,
    ConfigurationItem,
    Service,
    ServiceCiMapping,
)
from cmdbgraph.domain.types import Criticality


class TestService:
    def test_api_keys(self) -> None:
        svc = Service.model_validate(
            {
                "ServiceId": 1,
                "ServiceName": "Customer Portal",
                "Criticality": "Critical",
                "Status": "Active",
                "BusinessOwner": "Sarah Johnson",
                "TechnicalOwner": "Mike Chen",
                "SLA": "99.9%",
            }
        )
        assert svc.id == 1
        assert svc.name == "Customer Portal"
        assert svc.criticality is Criticality.CRITICAL
        assert svc.owner == "Sarah Johnson"
        assert svc.technical_owner == "Mike Chen"
        assert svc.sla == "99.9%"

    def test_defaults(self) -> None:
        svc = Service(id=2, name="Batch")
        assert svc.criticality is Criticality.MEDIUM
        assert svc.status == "Active"
        assert svc.owner is None

    def test_criticality_case_insensitive(self) -> None:
        assert Service(id=1, name="x", criticality=" high ").criticality is Criticality.HIGH

    def test_null_criticality_and_status(self) -> None:
        svc = Service.model_validate(
            {"ServiceId": 3, "ServiceName": "x", "Criticality": None, "Status": None}
        )
        assert svc.criticality is Criticality.MEDIUM
        assert svc.status == "Active"

    def test_unknown_criticality_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Service(id=1, name="x", criticality="Urgent")

    def test_extra_keys_ignored(self) -> None:
        svc = Service.model_validate(
            {"ServiceId": 1, "ServiceName": "x", "CreatedDate": "2024-01-01"}
        )
        assert svc.id == 1

    def test_frozen(self) -> None:
        svc = Service(id=1, name="x")
        with pytest.raises(ValidationError):
            svc.name = "y"  # type: ignore[misc]


class TestConfigurationItem:
    def test_api_keys(self) -> None:
        ci = ConfigurationItem.model_validate(
            {
                "CiId": 7,
                "CiName": "SQL-PROD-PRIMARY",
                "CiType": "Database",
                "Environment": "Production",
                "SubType": "SQL Server",
                "Location": "DC-East",
            }
        )
        assert ci.id == 7
        assert ci.ci_type == "Database"
        assert ci.sub_type == "SQL Server"
        assert ci.location == "DC-East"

    def test_short_type_key(self) -> None:
        ci = ConfigurationItem.model_validate({"id": 1, "name": "x", "type": "Server"})
        assert ci.ci_type == "Server"

    def test_defaults(self) -> None:
        ci = ConfigurationItem.model_validate(
            {"CiId": 1, "CiName": "x", "CiType": "Server", "Environment": None}
        )
        assert ci.environment == "Production"
        assert ci.status == "Active"

    def test_missing_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ConfigurationItem.model_validate({"CiId": 1, "CiName": "x"})


class TestLinks:
    def test_mapping_defaults(self) -> None:
        m = ServiceCiMapping.model_validate(
            {"MappingId": 1, "ServiceId": 2, "CiId": 3, "IsCritical": None}
        )
        assert m.relationship_type == "Contains"
        assert m.is_critical is False

    def test_mapping_critical_from_int(self) -> None:
        m = ServiceCiMapping.model_validate(
            {"MappingId": 1, "ServiceId": 2, "CiId": 3, "IsCritical": 1}
        )
        assert m.is_critical is True

    def test_relationship_active_defaults_true(self) -> None:
        rel = CiRelationship.model_validate(
            {
                "RelationshipId": 4,
                "SourceCiId": 1,
                "TargetCiId": 2,
                "RelationshipType": "DependsOn",
                "IsActive": None,
            }
        )
        assert rel.is_active is True
        assert rel.source_ci_id == 1
        assert rel.target_ci_id == 2

    def test_relationship_inactive(self) -> None:
        rel = CiRelationship(
            id=1, source_ci_id=1, target_ci_id=2, relationship_type="DependsOn", is_active=False
        )
        assert rel.is_active is False


class TestCmdbSnapshot:
    def test_from_api_envelopes(self) -> None:
        snapshot = CmdbSnapshot.from_api(
            services={"data": [{"ServiceId": 1, "ServiceName": "Portal"}]},
            cis=[{"CiId": 1, "CiName": "WEB", "CiType": "Server"}],
            mappings={"data": [{"MappingId": 1, "ServiceId": 1, "CiId": 1}]},
            relationships=None,
        )
        assert len(snapshot.services) == 1
        assert len(snapshot.cis) == 1
        assert len(snapshot.mappings) == 1
        assert snapshot.relationships == ()

    def test_from_api_empty_envelope(self) -> None:
        snapshot = CmdbSnapshot.from_api(services={"data": None})
        assert snapshot.services == ()

    def test_from_api_invalid_record(self) -> None:
        with pytest.raises(ValidationError):
            CmdbSnapshot.from_api(services=[{"ServiceName": "no id"}])

    def test_relationship_count(self, portal_snapshot: CmdbSnapshot) -> None:
        assert portal_snapshot.relationship_count == 6

    def test_filter_options(self, portal_snapshot: CmdbSnapshot) -> None:
        assert portal_snapshot.ci_types() == ["API", "Database", "Load Balancer", "Server"]
        assert portal_snapshot.environments() == ["Development", "Production"]

"""
proofspec Test Configuration

Shared fixtures and test utilities.
"""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator

import pytest

# Set test environment before any imports
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("PROOFSPEC_CONNECTOR_NAME", "testconnector")
os.environ.setdefault("INTEGRATION_TYPE", "testconnector")

# Use temp directories for configuration during tests
_test_temp_dir = Path(tempfile.gettempdir()) / "proofspec_test"
_test_temp_dir.mkdir(parents=True, exist_ok=True)
os.environ.setdefault("PROOFSPEC_CONFIG_DIR", str(_test_temp_dir / "json"))

from proofspec.datasource import DataSource  # noqa: E402


@pytest.fixture(autouse=True)
def reset_settings() -> Generator[None, None, None]:
    """Reset settings, tracers and the token environment before each test."""
    from proofspec.config import reset_settings
    from proofspec.observability import reset_tracers
    from proofspec.tokens import set_default_environment

    reset_settings()
    reset_tracers()
    set_default_environment(None)
    yield
    reset_settings()
    reset_tracers()
    set_default_environment(None)


@pytest.fixture
def run_async() -> Callable[[Any], Any]:
    """Run a coroutine to completion."""
    return asyncio.run


class FakeDataSource(DataSource):
    """
    In-memory data source.

    Each data set maps to either a result dict (returned for every call) or a
    callable `(params, page, metadata) -> result dict`.
    """

    def __init__(self, data_sets: dict[str, Any] | None = None):
        self.data_sets = data_sets or {}
        self.calls: list[dict[str, Any]] = []

    async def get_data(self, data_set, params=None, page=None, metadata=None):
        self.calls.append(
            {"data_set": data_set, "params": params, "page": page, "metadata": metadata}
        )
        entry = self.data_sets[data_set]
        if callable(entry):
            return entry(params, page, metadata)
        return entry

    def calls_for(self, data_set: str) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["data_set"] == data_set]


def complete(data: Any, **extra: Any) -> dict[str, Any]:
    """Complete data set result in wire form."""
    return {"status": "complete", "data": data, **extra}


@pytest.fixture
def make_data_source() -> Callable[..., FakeDataSource]:
    """Factory for in-memory data sources."""
    return FakeDataSource


@pytest.fixture
def sample_data_sets() -> dict[str, Any]:
    """Data sets backing the sample configuration."""
    return {
        "groups": complete(
            [
                {"id": "g2", "name": "engineering"},
                {"id": "g1", "name": "Admins"},
            ]
        ),
        "organization": complete({"name": "Acme"}),
        "users": complete(
            [
                {"name": "Ada", "lastLogin": "2024-01-05T23:04:00Z", "usage": 12.345},
                {"name": "Grace", "lastLogin": None, "usage": 0},
            ],
            source="https://api.example.com/users",
        ),
        "allUsers": complete([{"name": "Everyone", "usage": 1}]),
    }


@pytest.fixture
def sample_data_source(make_data_source, sample_data_sets) -> FakeDataSource:
    return make_data_source(sample_data_sets)


SAMPLE_CRITERIA_FIELDS = {
    "$schema": "./criteriaFields.schema.json",
    "proofCategory": {
        "type": "select",
        "property": "proofCategory",
        "label": "Proof Category",
        "isRequired": True,
        "fixedValues": [
            {"value": "access", "label": "Access"},
            {"value": "security", "label": "Security"},
        ],
    },
    "group": {
        "type": "select",
        "property": "group",
        "label": "Group",
        "isRequired": True,
        "dataSet": "groups",
        "valueProperty": "id",
        "labelProperty": "name",
        "fixedValues": [
            {"value": "{{constants.ID_ALL}}", "label": "{{messages.LABEL_ALL_GROUPS}}"}
        ],
    },
    "status": {
        "type": "select",
        "property": "status",
        "label": "Status",
        "isRequired": False,
        "defaultDisplayValue": "Any status",
        "fixedValues": [
            {"value": "active", "label": "Active"},
            {"value": "suspended", "label": "Suspended"},
        ],
    },
    "note": {
        "type": "text",
        "property": "note",
        "label": "Note",
        "isRequired": False,
        "placeholder": "Optional note",
    },
}

SAMPLE_MESSAGES = {
    "TITLE": "User Access Report",
    "PROOF_TYPE_USER_ACCESS": "User Access",
    "LABEL_ALL_GROUPS": "All Groups",
    "NO_USERS": "No users in {{lookups.org.name}}",
}

SAMPLE_DEFINITION = {
    "description": "{{messages.TITLE}} by group",
    "criteria": [{"name": "group", "page": 0}, {"name": "status", "page": 1}],
    "proofSpec": {
        "period": "weekly",
        "useVersioning": True,
        "suggestedName": "{{criteriaLabels.group}} Users",
        "format": "tabular",
        "orientation": "landscape",
        "title": "{{messages.TITLE}}",
        "subtitle": "Users at {{lookups.org.name}}",
        "dataSet": "users",
        "dataSetParams": {"groupId": "{{criteria.group}}", "limit": 50},
        "noResultsMessage": "{{messages.NO_USERS}}",
        "lookups": [{"name": "org", "dataSet": "organization"}],
        "fields": [
            {"property": "name", "label": "Name"},
            {"property": "lastLogin", "label": "Last Login", "type": "date"},
            {"property": "usage", "label": "Usage", "type": "number", "format": "percent"},
        ],
    },
    "overrides": [
        {
            "condition": {"value": "{{criteria.group}}", "criteria": "{{constants.ID_ALL}}"},
            "proofSpec": {"dataSet": "allUsers", "subtitle": "All groups"},
        }
    ],
}

SAMPLE_PROOF_TYPES = {
    "$schema": "./proofTypes.schema.json",
    "userAccess": {"label": "{{messages.PROOF_TYPE_USER_ACCESS}}", "category": "access"},
    "groupList": {
        "label": "Group List",
        "category": "security",
        "definition": {
            "description": "All groups",
            "criteria": [],
            "proofSpec": {
                "title": "Groups",
                "dataSet": "groups",
                "fields": [{"property": "name", "label": "Group"}],
            },
        },
    },
}


def write_json(path: Path, document: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document), encoding="utf-8")


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Configuration directory holding the sample connector."""
    root = tmp_path / "json"
    write_json(root / "criteriaFields.json", SAMPLE_CRITERIA_FIELDS)
    write_json(root / "proofTypes.json", SAMPLE_PROOF_TYPES)
    write_json(root / "messages.json", SAMPLE_MESSAGES)
    write_json(root / "proofs" / "userAccess.json", SAMPLE_DEFINITION)
    return root


@pytest.fixture
def sample_definition():
    from proofspec.core.schemas import ProofTypeDefinition

    return ProofTypeDefinition.model_validate(SAMPLE_DEFINITION)


@pytest.fixture
def sample_messages() -> dict[str, str]:
    return dict(SAMPLE_MESSAGES)


@pytest.fixture
def criteria_provider(config_dir, sample_data_source):
    from proofspec.criteria import JsonCriteriaProvider

    return JsonCriteriaProvider(config_dir, sample_data_source)


@pytest.fixture
def task_audit_handler():
    """Proof type implemented in code, offered in the security category."""
    from proofspec.core.enums import DataFormat
    from proofspec.core.schemas import CriteriaMetadata, ProofDataResponse, ProofSchema
    from proofspec.proofs import ProofProvider

    class TaskAuditProvider(ProofProvider):
        proof_type = "taskAudit"
        proof_type_label = "Task Audit"
        category = "security"

        async def generate_criteria_metadata(self, criteria_values, pages):
            return CriteriaMetadata(pages=pages, suggested_name="Task Audit")

        async def generate_schema(self, criteria_values):
            return ProofSchema(format=DataFormat.TABULAR)

        async def get_proof_data(
            self, hypersync, user, authorized_user, sync_start_date, page=None, metadata=None
        ):
            return ProofDataResponse(data=[], combine=True)

    return TaskAuditProvider

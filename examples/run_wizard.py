#!/usr/bin/env python3
"""
Example: Walk the configuration wizard and build a proof

Uses an in-memory data source and inline configuration to show the calls a
host makes: criteria metadata for each wizard step, then proof generation.

Requirements:
    pip install -e .

Usage:
    python examples/run_wizard.py
"""

import asyncio
import json
from datetime import datetime, timezone

from proofspec.core.schemas import (
    CriteriaFieldConfig,
    Hypersync,
    HypersyncSettings,
    ProofTypeConfig,
    UserContext,
)
from proofspec.criteria import JsonCriteriaProvider
from proofspec.datasource import DataSource
from proofspec.engine import HypersyncEngine
from proofspec.observability import configure_logging
from proofspec.proofs import ProofTypeRegistry

DATA = {
    "teams": [{"id": "t1", "name": "Platform"}, {"id": "t2", "name": "billing"}],
    "members": {
        "t1": [
            {"name": "Ada", "role": "owner", "joined": "2023-03-01T09:30:00Z"},
            {"name": "Linus", "role": "member", "joined": "2024-02-12T17:05:00Z"},
        ],
        "t2": [],
    },
}

CRITERIA_FIELDS = {
    "team": CriteriaFieldConfig.model_validate(
        {
            "type": "select",
            "property": "team",
            "label": "Team",
            "isRequired": True,
            "dataSet": "teams",
            "valueProperty": "id",
            "labelProperty": "name",
        }
    )
}

PROOF_TYPES = {
    "teamMembers": ProofTypeConfig.model_validate(
        {
            "label": "Team Members",
            "definition": {
                "description": "Members of a team",
                "criteria": [{"name": "team", "page": 0}],
                "proofSpec": {
                    "suggestedName": "{{criteriaLabels.team}} Members",
                    "title": "Team Members",
                    "subtitle": "{{criteriaLabels.team}}",
                    "dataSet": "members",
                    "dataSetParams": {"team": "{{criteria.team}}"},
                    "autoLayout": True,
                    "fields": [
                        {"property": "name", "label": "Name"},
                        {"property": "role", "label": "Role"},
                        {"property": "joined", "label": "Joined", "type": "date"},
                    ],
                },
            },
        }
    )
}


class InMemoryDataSource(DataSource):
    """Serves DATA, one page per data set."""

    async def get_data(self, data_set, params=None, page=None, metadata=None):
        if data_set == "members":
            return {"status": "complete", "data": DATA["members"][params["team"]]}
        return {"status": "complete", "data": DATA[data_set]}


async def main():
    configure_logging()

    source = InMemoryDataSource()
    engine = HypersyncEngine(
        ProofTypeRegistry(PROOF_TYPES),
        source,
        JsonCriteriaProvider(None, source, criteria_fields=CRITERIA_FIELDS),
    )

    # Each step adds the value the user picked on the previous screen
    steps = [{}, {"proofType": "teamMembers"}, {"proofType": "teamMembers", "team": "t1"}]
    for criteria in steps:
        metadata = await engine.generate_criteria_metadata(criteria)
        print(f"\n🧭  Criteria: {criteria}")
        for index, page in enumerate(metadata.pages):
            for field in page.fields:
                options = ", ".join(str(o.label) for o in field.options)
                state = "disabled" if field.is_disabled else "enabled"
                print(f"    page {index} {field.name} ({state}): {options}")
            print(f"    page {index} valid: {page.is_valid}")
        if metadata.suggested_name:
            print(f"    Suggested name: {metadata.suggested_name}")

    hypersync = Hypersync(
        settings=HypersyncSettings(name="Platform Members", criteria=steps[-1])
    )
    response = await engine.get_proof_data(
        hypersync,
        UserContext(time_zone="Europe/London"),
        "ada@example.com",
        datetime.now(timezone.utc),
    )

    print("\n📄  Proof document:")
    print(json.dumps(response.to_wire(), indent=2))


if __name__ == "__main__":
    asyncio.run(main())

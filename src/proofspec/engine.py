"""
Hypersync Engine

Entry point a host calls to drive the configuration wizard and to generate
proof. The first wizard page always starts with the optional proof category
field and the proof type field; the selected proof type's provider then
appends its own criteria.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from proofspec.core.enums import CriteriaFieldType, HypersyncPeriod
from proofspec.core.exceptions import (
    ConfigurationError,
    ProofTypeMismatchError,
    UnknownProofTypeError,
)
from proofspec.core.schemas import (
    CriteriaField,
    CriteriaMetadata,
    CriteriaPage,
    Hypersync,
    ProofDataResponse,
    ProofSchema,
    SelectOption,
    UserContext,
)
from proofspec.criteria.provider import CriteriaProvider
from proofspec.datasource import DataSource
from proofspec.proofs.provider import ProofProvider
from proofspec.proofs.registry import ProofTypeRegistry
from proofspec.tokens import init_token_context

logger = logging.getLogger(__name__)

PROOF_TYPE_FIELD = "proofType"
PROOF_TYPE_LABEL = "Proof"
OTHER_CATEGORY = "other"
OTHER_CATEGORY_LABEL = "Other"


class HypersyncEngine:
    """
    Drives the configuration wizard and proof generation for one connector.

    Usage:
        engine = HypersyncEngine(registry, data_source, criteria_provider)
        metadata = await engine.generate_criteria_metadata({"proofType": "userAccess"})
        response = await engine.get_proof_data(hypersync, user, "jane", datetime.now(UTC))
    """

    def __init__(
        self,
        registry: ProofTypeRegistry,
        data_source: DataSource,
        criteria_provider: CriteriaProvider,
    ) -> None:
        self.registry = registry
        self.data_source = data_source
        self.criteria_provider = criteria_provider

    def create_provider(self, proof_type: str) -> ProofProvider:
        return self.registry.create(proof_type, self.data_source, self.criteria_provider)

    async def generate_criteria_metadata(
        self,
        criteria: Mapping[str, Any],
        pages: list[CriteriaPage] | None = None,
    ) -> CriteriaMetadata:
        """
        Build the wizard pages for the criteria chosen so far.

        A stale proof type (one no longer offered for the chosen category or
        criteria) is cleared before the pages are built.
        """
        logger.debug("[Engine] Generating criteria metadata")
        criteria = dict(criteria)
        if not pages:
            pages = [CriteriaPage()]

        category_field = await self.criteria_provider.generate_proof_category_field(
            criteria, init_token_context(criteria, self.registry.messages)
        )
        if category_field is not None:
            self._validate_category_field(category_field)
            if OTHER_CATEGORY in self.registry.get_custom_proof_type_categories():
                category_field.options.append(
                    SelectOption(value=OTHER_CATEGORY, label=OTHER_CATEGORY_LABEL)
                )
            pages[0].fields.append(category_field)

        category = category_field.value if category_field is not None else None
        proof_types = self.registry.get_options(criteria, category)

        # The user seems to be going a different direction
        proof_type = criteria.get(PROOF_TYPE_FIELD)
        if proof_type and not any(option.value == proof_type for option in proof_types):
            logger.info(f"[Engine] Clearing proof type {proof_type}, no longer offered")
            del criteria[PROOF_TYPE_FIELD]
            proof_type = None

        pages[0].fields.append(
            CriteriaField(
                name=PROOF_TYPE_FIELD,
                type=CriteriaFieldType.SELECT,
                label=PROOF_TYPE_LABEL,
                options=proof_types,
                value=proof_type,
                is_required=True,
                is_disabled=category_field is not None and not category_field.value,
            )
        )

        # No provider can be created until the type is known
        if not proof_type:
            return CriteriaMetadata(
                pages=pages,
                period=HypersyncPeriod.MONTHLY,
                use_versioning=True,
                suggested_name="",
                description="",
                enable_excel_output=False,
            )

        # Default criteria are complete; the provider may add invalid pages
        pages[0].is_valid = True
        provider = self.create_provider(proof_type)
        return await provider.generate_criteria_metadata(criteria, pages)

    async def generate_schema(self, criteria: Mapping[str, Any]) -> ProofSchema:
        provider = self.create_provider(self._require_proof_type(criteria))
        return await provider.generate_schema(criteria)

    async def generate_sync_plan(
        self, criteria: Mapping[str, Any], metadata: Any = None
    ) -> dict[str, Any]:
        provider = self.create_provider(self._require_proof_type(criteria))
        return await provider.generate_sync_plan(criteria, metadata)

    async def get_proof_data(
        self,
        hypersync: Hypersync,
        user: UserContext,
        authorized_user: str,
        sync_start_date: datetime,
        page: str | None = None,
        metadata: Any = None,
        expected_proof_type: str | None = None,
    ) -> ProofDataResponse:
        """
        Generate the proof of a sync.

        Raises:
            ProofTypeMismatchError: expected_proof_type is given and differs
                from the proof type saved in the sync.
        """
        proof_type = self._require_proof_type(hypersync.settings.criteria)
        if expected_proof_type is not None and expected_proof_type != proof_type:
            raise ProofTypeMismatchError(expected_proof_type, proof_type)
        provider = self.create_provider(proof_type)
        return await provider.get_proof_data(
            hypersync, user, authorized_user, sync_start_date, page, metadata
        )

    @staticmethod
    def _validate_category_field(field: CriteriaField) -> None:
        if (
            field.type != CriteriaFieldType.SELECT
            or not field.options
            or not isinstance(field.options[0].value, str)
        ):
            raise ConfigurationError("Invalid proof category field.", {"field": field.name})

    @staticmethod
    def _require_proof_type(criteria: Mapping[str, Any]) -> str:
        proof_type = criteria.get(PROOF_TYPE_FIELD)
        if not proof_type:
            # Same client error as an unregistered type
            raise UnknownProofTypeError(str(proof_type))
        return proof_type

"""
Proof Providers

A proof provider supplies everything needed for one proof type: the wizard
criteria, the test schema, the sync plan and the proof documents.

Proof types come in two kinds:
- Code handlers subclass ProofProvider directly.
- Declarative proof types are JSON definitions served by
  DeclarativeProofProvider.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime
from typing import Any, ClassVar

from proofspec.core.enums import HypersyncPeriod, ProofFieldType
from proofspec.core.schemas import (
    CriteriaMetadata,
    CriteriaPage,
    Hypersync,
    ProofDataResponse,
    ProofSchema,
    ProofTypeDefinition,
    SchemaField,
    SyncPlan,
    UserContext,
)
from proofspec.criteria.provider import CriteriaProvider
from proofspec.datasource import DataSource
from proofspec.proofs.builder import ProofDocumentBuilder
from proofspec.proofs.composer import ProofSpecComposer
from proofspec.tokens import TokenContext, init_token_context, resolve_tokens

logger = logging.getLogger(__name__)

DefinitionLoader = Callable[[], Awaitable[ProofTypeDefinition]]


class ProofProvider(ABC):
    """
    Base class for a proof type.

    Code handlers set the class attributes and implement the abstract
    methods; the registry reads `proof_type`, `proof_type_label`,
    `matches_criteria` and `matches_category` without instantiating.
    """

    proof_type: ClassVar[str] = ""
    proof_type_label: ClassVar[str] = ""
    category: ClassVar[str | None] = None

    def __init__(self, data_source: DataSource, criteria_provider: CriteriaProvider) -> None:
        self.data_source = data_source
        self.criteria_provider = criteria_provider

    @classmethod
    def matches_criteria(cls, criteria: Mapping[str, Any]) -> bool:
        """True if this proof type should be offered for the given criteria."""
        return True

    @classmethod
    def matches_category(cls, category: str | None) -> bool:
        """True if this proof type belongs to the category chosen by the user."""
        return category is None or cls.category is None or cls.category == category

    @abstractmethod
    async def generate_criteria_metadata(
        self, criteria_values: Mapping[str, Any], pages: list[CriteriaPage]
    ) -> CriteriaMetadata:
        """
        Generate the criteria metadata for the proof type.

        Args:
            criteria_values: Criteria values chosen by the user.
            pages: Wizard pages; fields are appended in place.
        """

    @abstractmethod
    async def generate_schema(self, criteria_values: Mapping[str, Any]) -> ProofSchema:
        """Schema of the generated proof, used for automated testing."""

    async def generate_sync_plan(
        self, criteria_values: Mapping[str, Any], metadata: Any = None
    ) -> dict[str, Any]:
        """How the host should run a sync; by default pages are combined."""
        return {"syncPlan": SyncPlan().to_wire()}

    @abstractmethod
    async def get_proof_data(
        self,
        hypersync: Hypersync,
        user: UserContext,
        authorized_user: str,
        sync_start_date: datetime,
        page: str | None = None,
        metadata: Any = None,
    ) -> ProofDataResponse:
        """
        Retrieve the data needed to generate the proof files of a sync.

        Args:
            hypersync: The sync being run.
            user: Localization preferences of the user who created the sync.
            authorized_user: Name or email of the external user.
            sync_start_date: When the sync started.
            page: Current page of the sync. Optional.
            metadata: Continuation metadata from a pending response. Optional.
        """


class DeclarativeProofProvider(ProofProvider):
    """Proof provider for a proof type defined entirely in JSON."""

    def __init__(
        self,
        proof_type: str,
        data_source: DataSource,
        criteria_provider: CriteriaProvider,
        messages: Mapping[str, str] | None,
        get_definition: DefinitionLoader,
        connector_name: str | None = None,
    ) -> None:
        super().__init__(data_source, criteria_provider)
        # Instance attribute shadows the class-level default for this type
        self.proof_type = proof_type
        self.messages = dict(messages or {})
        self._get_definition = get_definition
        self.composer = ProofSpecComposer(data_source, criteria_provider)
        self.builder = ProofDocumentBuilder(
            data_source, criteria_provider, self.messages, connector_name=connector_name
        )

    def _init_token_context(self, criteria_values: Mapping[str, Any]) -> TokenContext:
        return init_token_context(criteria_values, self.messages)

    async def generate_criteria_metadata(
        self, criteria_values: Mapping[str, Any], pages: list[CriteriaPage]
    ) -> CriteriaMetadata:
        definition = await self._get_definition()
        token_context = self._init_token_context(criteria_values)

        await self.criteria_provider.generate_criteria_fields(
            definition.criteria, criteria_values, token_context, pages
        )

        # With every criterion specified the proof spec can supply the remaining values
        spec = None
        suggested_name = ""
        if pages and pages[-1].is_valid:
            spec = self.composer.compose(definition, token_context)
            await self.composer.run_lookups(spec, token_context)
            criteria_labels = find_criteria_labels(pages, token_context["criteria"])
            suggested_name = resolve_tokens(
                spec.suggested_name, {**token_context, "criteriaLabels": criteria_labels}
            )

        return CriteriaMetadata(
            pages=pages,
            period=spec.period if spec else HypersyncPeriod.MONTHLY,
            use_versioning=spec.use_versioning if spec else False,
            suggested_name=suggested_name,
            description=resolve_tokens(definition.description, token_context),
            enable_excel_output=True,
        )

    async def generate_schema(self, criteria_values: Mapping[str, Any]) -> ProofSchema:
        definition = await self._get_definition()
        token_context = self._init_token_context(criteria_values)
        spec = self.composer.compose(definition, token_context)
        return ProofSchema(
            format=spec.format,
            is_hierarchical=False,
            fields=[
                SchemaField(
                    property=f.property,
                    label=resolve_tokens(f.label, token_context),
                    type=f.type or ProofFieldType.TEXT,
                )
                for f in spec.fields
            ],
        )

    async def generate_sync_plan(
        self, criteria_values: Mapping[str, Any], metadata: Any = None
    ) -> dict[str, Any]:
        logger.info(f"[ProofProvider] Generating sync plan for proof {self.proof_type}")
        return await super().generate_sync_plan(criteria_values, metadata)

    async def get_proof_data(
        self,
        hypersync: Hypersync,
        user: UserContext,
        authorized_user: str,
        sync_start_date: datetime,
        page: str | None = None,
        metadata: Any = None,
    ) -> ProofDataResponse:
        logger.info(f"[ProofProvider] Generating declarative proof type {self.proof_type}")
        definition = await self._get_definition()
        return await self.builder.build(
            definition, hypersync, user, authorized_user, sync_start_date, page, metadata
        )


def find_criteria_labels(
    pages: list[CriteriaPage], criteria: Mapping[str, Any]
) -> dict[str, str | None]:
    """Reverse lookup of the option label of each selected criterion value."""
    fields = {field.name: field for page in pages for field in page.fields}
    labels: dict[str, str | None] = {}
    for name, value in criteria.items():
        field = fields.get(name)
        if field is None or not field.options:
            continue
        labels[name] = next((o.label for o in field.options if o.value == value), None)
    return labels

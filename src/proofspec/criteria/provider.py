"""
Criteria Providers

A criteria provider supplies the criteria fields of a proof type to the
configuration wizard and the criterion values displayed in generated proof.
JsonCriteriaProvider reads its field configurations from criteriaFields.json.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from proofspec.core.constants import PROOF_CATEGORY_FIELDS
from proofspec.core.enums import CriteriaFieldType
from proofspec.core.exceptions import (
    DuplicateCriteriaFieldError,
    UnknownCriterionError,
    UnsupportedFieldTypeError,
)
from proofspec.core.schemas import (
    CriteriaConfig,
    CriteriaField,
    CriteriaFieldConfig,
    CriteriaPage,
    CriterionRef,
    ProofCriterionValue,
    SelectOption,
)
from proofspec.criteria.fields import CriteriaFieldBuilder
from proofspec.criteria.pages import CriteriaPageAssembler
from proofspec.datasource import DataSource
from proofspec.loader import load_criteria_fields
from proofspec.tokens import TokenContext, resolve_tokens

logger = logging.getLogger(__name__)


class CriteriaProvider(ABC):
    """Provides criteria metadata and values to a proof provider."""

    @abstractmethod
    async def generate_criteria_fields(
        self,
        proof_criteria: Sequence[CriterionRef],
        criteria_values: Mapping[str, Any],
        token_context: TokenContext,
        pages: list[CriteriaPage],
    ) -> None:
        """
        Add criteria fields to the provided set of criteria pages.

        Args:
            proof_criteria: References to the criteria to include.
            criteria_values: Criteria values selected by the user.
            token_context: Context used when resolving placeholder tokens.
            pages: The set of criteria pages, mutated in place.
        """

    @abstractmethod
    async def generate_proof_criteria(
        self,
        proof_criteria: Sequence[CriterionRef],
        criteria_values: Mapping[str, Any],
        token_context: TokenContext,
    ) -> list[ProofCriterionValue]:
        """Return criterion values that can be rendered in a proof document."""

    async def generate_proof_category_field(
        self, criteria_values: Mapping[str, Any], token_context: TokenContext
    ) -> CriteriaField | None:
        """Optional proof category field shown ahead of the proof type."""
        return None


class JsonCriteriaProvider(CriteriaProvider):
    """
    Criteria provider backed by field configurations declared in JSON.

    Usage:
        provider = JsonCriteriaProvider(Path("json"), data_source)
        pages = [CriteriaPage()]
        await provider.generate_criteria_fields(refs, values, context, pages)
    """

    def __init__(
        self,
        config_dir: Path | None,
        data_source: DataSource,
        criteria_fields: Mapping[str, CriteriaFieldConfig] | None = None,
    ) -> None:
        """
        Args:
            config_dir: Directory holding criteriaFields.json. A missing file
                yields an empty configuration.
            data_source: Data source used for select options.
            criteria_fields: Pre-loaded configuration; skips reading the file.
        """
        self.data_source = data_source
        if criteria_fields is not None:
            self._criteria_fields: CriteriaConfig = dict(criteria_fields)
        elif config_dir is not None:
            self._criteria_fields = load_criteria_fields(config_dir)
        else:
            self._criteria_fields = {}
        self.field_builder = CriteriaFieldBuilder(data_source)
        self.page_assembler = CriteriaPageAssembler(self._criteria_fields, self.field_builder)

    def get_config(self) -> CriteriaConfig:
        """Returns the criteria field configuration."""
        return self._criteria_fields

    def add_criteria_field(self, name: str, criteria_field: CriteriaFieldConfig) -> None:
        """Adds a new criteria field to the configured criteria fields."""
        if name in self._criteria_fields:
            raise DuplicateCriteriaFieldError(name)
        self._criteria_fields[name] = criteria_field

    async def generate_proof_category_field(
        self, criteria_values: Mapping[str, Any], token_context: TokenContext
    ) -> CriteriaField | None:
        # The category field is optional; None tells the caller there is none
        for name in PROOF_CATEGORY_FIELDS:
            config = self._criteria_fields.get(name)
            if config is not None:
                return await self.field_builder.build(
                    config, criteria_values, token_context, False
                )
        return None

    async def generate_criteria_fields(
        self,
        proof_criteria: Sequence[CriterionRef],
        criteria_values: Mapping[str, Any],
        token_context: TokenContext,
        pages: list[CriteriaPage],
    ) -> None:
        await self.page_assembler.assemble(proof_criteria, criteria_values, token_context, pages)

    async def get_criteria_field_options(
        self,
        config: CriteriaFieldConfig,
        criteria_values: Mapping[str, Any],
        token_context: TokenContext,
    ) -> list[SelectOption]:
        return await self.field_builder.get_options(config, criteria_values, token_context)

    async def generate_proof_criteria(
        self,
        proof_criteria: Sequence[CriterionRef],
        criteria_values: Mapping[str, Any],
        token_context: TokenContext,
    ) -> list[ProofCriterionValue]:
        criteria: list[ProofCriterionValue] = []

        for ref in proof_criteria:
            field = self._criteria_fields.get(ref.name)
            if field is None:
                raise UnknownCriterionError(ref.name)
            label = resolve_tokens(field.label, token_context)
            value = criteria_values.get(field.property)

            # Optional and unset: show the configured default display value
            if field.is_required is False and value is None:
                criteria.append(
                    ProofCriterionValue(
                        name=field.property,
                        label=label,
                        value=resolve_tokens(field.default_display_value or "", token_context),
                    )
                )
                continue

            if field.type == CriteriaFieldType.SELECT:
                options = await self.get_criteria_field_options(
                    field, criteria_values, token_context
                )
                option = next((o for o in options if o.value == value), None)
                criteria.append(
                    ProofCriterionValue(
                        name=field.property,
                        label=label,
                        value=option.label if option else None,
                    )
                )
            elif field.type == CriteriaFieldType.TEXT:
                criteria.append(ProofCriterionValue(name=field.property, label=label, value=value))
            else:
                raise UnsupportedFieldTypeError(field.type)

        return criteria

"""
Criteria Page Assembler

Lays out the criteria of a proof type onto wizard pages. Fields are processed
in declaration order because each field is disabled until the field before it
has a value; once a field is disabled, every later field is too.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from proofspec.core.enums import SUPPORTED_CRITERIA_FIELD_TYPES
from proofspec.core.exceptions import UnknownCriterionError, UnsupportedFieldTypeError
from proofspec.core.schemas import CriteriaFieldConfig, CriteriaPage, CriterionRef
from proofspec.criteria.fields import CriteriaFieldBuilder
from proofspec.tokens import TokenContext


class CriteriaPageAssembler:
    """Appends criteria fields to a list of pages, keeping page validity current."""

    def __init__(
        self,
        criteria_fields: Mapping[str, CriteriaFieldConfig],
        field_builder: CriteriaFieldBuilder,
    ) -> None:
        self.criteria_fields = criteria_fields
        self.field_builder = field_builder

    def get_field_config(self, name: str) -> CriteriaFieldConfig:
        """Look up a field config, rejecting unknown names and types."""
        config = self.criteria_fields.get(name)
        if config is None:
            raise UnknownCriterionError(name)
        if config.type not in SUPPORTED_CRITERIA_FIELD_TYPES:
            raise UnsupportedFieldTypeError(config.type)
        return config

    async def assemble(
        self,
        criterion_refs: Sequence[CriterionRef],
        criteria_values: Mapping[str, Any],
        token_context: TokenContext,
        pages: list[CriteriaPage],
    ) -> None:
        """
        Add one field per criterion reference to `pages` (mutated in place).

        With no references the last page is marked valid: a proof type that
        needs no further input is immediately ready. `pages` grows with empty,
        invalid pages up to the highest referenced page index.
        """
        if not criterion_refs:
            if not pages:
                pages.append(CriteriaPage())
            pages[-1].is_valid = True
            return

        last_config: CriteriaFieldConfig | None = None
        prev_disabled = False

        for ref in criterion_refs:
            config = self.get_field_config(ref.name)

            # A field cannot be edited until the previous field has a value
            is_disabled = prev_disabled or (
                last_config is not None and criteria_values.get(last_config.property) is None
            )

            while ref.page >= len(pages):
                pages.append(CriteriaPage())

            page = pages[ref.page]
            page.fields.append(
                await self.field_builder.build(config, criteria_values, token_context, is_disabled)
            )
            page.is_valid = not is_disabled and (
                not config.is_required or criteria_values.get(config.property) is not None
            )

            last_config = config
            prev_disabled = is_disabled

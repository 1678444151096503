"""
Criteria Field Builder

Turns one criteria field configuration into a render-ready field. Select
fields get their options from a paginated data set and/or from fixed values
declared in configuration.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from proofspec.core.compare import sort_by
from proofspec.core.enums import CriteriaFieldType, DataSetResultStatus
from proofspec.core.exceptions import InvalidDataSetError, PendingCriteriaDataError
from proofspec.core.schemas import CriteriaField, CriteriaFieldConfig, SelectOption
from proofspec.datasource import DataSource, fetch_all_pages
from proofspec.tokens import TokenContext, resolve_params, resolve_tokens

logger = logging.getLogger(__name__)


class CriteriaFieldBuilder:
    """Builds criteria fields, fetching select options from a data source."""

    def __init__(self, data_source: DataSource, max_pages: int | None = None) -> None:
        """
        Args:
            data_source: Authorized data source used for option data sets.
            max_pages: Page limit per option data set (defaults to settings).
        """
        self.data_source = data_source
        self.max_pages = max_pages

    async def build(
        self,
        config: CriteriaFieldConfig,
        criteria_values: Mapping[str, Any],
        token_context: TokenContext,
        is_disabled: bool = False,
    ) -> CriteriaField:
        """Build the field; disabled and text fields get no options."""
        if is_disabled or config.type != CriteriaFieldType.SELECT:
            options: list[SelectOption] = []
        else:
            options = await self.get_options(config, criteria_values, token_context)

        return CriteriaField(
            name=config.property,
            type=config.type,
            label=resolve_tokens(config.label, token_context),
            is_required=config.is_required,
            options=options,
            value=criteria_values.get(config.property),
            placeholder=(
                resolve_tokens(config.placeholder, token_context) if config.placeholder else None
            ),
            is_disabled=is_disabled,
        )

    async def get_options(
        self,
        config: CriteriaFieldConfig,
        criteria_values: Mapping[str, Any],
        token_context: TokenContext,
    ) -> list[SelectOption]:
        """
        Collect the options of a select field.

        Data set options are fetched page by page, projected onto
        value/label and sorted by label. Fixed values are placed ahead of
        them in their declared order.

        Raises:
            PendingCriteriaDataError: A page did not complete.
            InvalidDataSetError: A page's data is not a list of objects.
        """
        options: list[SelectOption] = []

        if config.has_data_set:
            # Params only see the criteria scope
            params = resolve_params(config.data_set_params, {"criteria": dict(criteria_values)})
            results = await fetch_all_pages(
                self.data_source, config.data_set, params, self.max_pages
            )
            for result in results:
                if result.status != DataSetResultStatus.COMPLETE:
                    raise PendingCriteriaDataError(config.data_set)
                if not isinstance(result.data, list):
                    raise InvalidDataSetError(config.data_set)
                options.extend(
                    self._project(item, config.value_property, config.label_property, config)
                    for item in result.data
                )
            options = sort_by(options, lambda o: o.label)
            logger.debug(f"[Criteria] {len(options)} options for {config.property}")

        if config.fixed_values:
            fixed = [
                SelectOption(
                    value=(
                        resolve_tokens(fv.value, token_context)
                        if isinstance(fv.value, str)
                        else fv.value
                    ),
                    label=resolve_tokens(fv.label or "", token_context),
                )
                for fv in config.fixed_values
            ]
            options = fixed + options

        return options

    @staticmethod
    def _project(
        item: Any, value_property: str, label_property: str, config: CriteriaFieldConfig
    ) -> SelectOption:
        if not isinstance(item, Mapping):
            raise InvalidDataSetError(config.data_set or "")
        label = item.get(label_property)
        return SelectOption(
            value=item.get(value_property),
            label=label if label is None else str(label),
        )

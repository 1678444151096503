"""
Proof Specification Composer

Builds the specification for one request by layering matching overrides on
top of a proof type's base specification, then fetches the lookups the
specification declares so templates can reference them as {{lookups.name}}.

Override semantics:
- Overrides are applied in declared order; later overrides win on key
  collisions.
- Top-level keys are replaced wholesale, arrays included.
- `dataSetParams` is the one exception: it is merged key by key.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from proofspec.core.constants import DEFAULT_NO_RESULTS_MESSAGE, ID_UNDEFINED
from proofspec.core.enums import DataSetResultStatus
from proofspec.core.exceptions import (
    ConfigurationError,
    InvalidTokenError,
    PendingLookupError,
    TokenRecursionError,
)
from proofspec.core.schemas import (
    CriterionRef,
    OverrideCondition,
    ProofCriterionValue,
    ProofSpec,
    ProofTypeDefinition,
)
from proofspec.criteria.provider import CriteriaProvider
from proofspec.datasource import DataSource, fetch_data
from proofspec.tokens import (
    MISSING,
    TokenContext,
    resolve_params,
    resolve_tokens,
    resolve_tokens_with_missing_default,
)

logger = logging.getLogger(__name__)

DATA_SET_PARAMS_KEY = "dataSetParams"


class ProofSpecComposer:
    """Composes proof specifications and resolves their lookups."""

    def __init__(
        self, data_source: DataSource, criteria_provider: CriteriaProvider | None = None
    ) -> None:
        self.data_source = data_source
        self.criteria_provider = criteria_provider

    def compose(self, definition: ProofTypeDefinition, token_context: TokenContext) -> ProofSpec:
        """
        Combine the base spec with every override whose condition matches.

        The definition is not modified; a new ProofSpec is returned.
        """
        spec = definition.proof_spec.model_dump(by_alias=True)

        for index, override in enumerate(definition.overrides):
            if not self.condition_matches(override.condition, token_context):
                continue
            logger.debug(f"[Composer] Applying override {index}")
            patch = _to_wire_keys(override.proof_spec)
            merged = {**spec, **patch}
            if patch.get(DATA_SET_PARAMS_KEY):
                merged[DATA_SET_PARAMS_KEY] = {
                    **(spec.get(DATA_SET_PARAMS_KEY) or {}),
                    **patch[DATA_SET_PARAMS_KEY],
                }
            spec = merged

        if not spec.get("noResultsMessage"):
            spec["noResultsMessage"] = DEFAULT_NO_RESULTS_MESSAGE

        try:
            composed = ProofSpec.model_validate(spec)
        except ValidationError as e:
            raise ConfigurationError(
                "Proof specification overrides produced an invalid specification",
                {"errors": e.errors(include_url=False, include_context=False)},
            ) from e

        logger.debug(f"[Composer] Using proof specification {composed.model_dump_json(by_alias=True)}")
        return composed

    def condition_matches(self, condition: OverrideCondition, token_context: TokenContext) -> bool:
        """
        True when both operands of the condition resolve to the same string.

        A token naming a criterion that has not been set yet resolves to
        nothing, so a condition over it does not match. When the criteria
        operand is the "unselected optional" marker, a value operand that
        resolves to nothing matches. Any other unresolvable token raises.
        """
        operand = _resolve_operand(condition.criteria, token_context)
        if operand is MISSING:
            return False

        if operand == ID_UNDEFINED:
            value = _resolve_operand(condition.value, token_context, missing_default=True)
            return value is MISSING or value == operand

        value = _resolve_operand(condition.value, token_context)
        return value is not MISSING and value == operand

    async def run_lookups(self, spec: ProofSpec, token_context: TokenContext) -> None:
        """
        Fetch each declared lookup and store its data in token_context.

        Lookups have no continuation; a pending result is an error.
        """
        lookups = token_context.setdefault("lookups", {})
        for lookup in spec.lookups:
            params = resolve_params(lookup.data_set_params, token_context)
            result = await fetch_data(self.data_source, lookup.data_set, params)
            if result.status != DataSetResultStatus.COMPLETE:
                raise PendingLookupError(lookup.data_set)
            lookups[lookup.name] = result.data

    async def generate_proof_criteria(
        self,
        criterion_refs: Sequence[CriterionRef],
        criteria_values: Mapping[str, Any],
        token_context: TokenContext,
    ) -> list[ProofCriterionValue]:
        """Criterion provenance shown at the top of a proof document."""
        if self.criteria_provider is None:
            return []
        return await self.criteria_provider.generate_proof_criteria(
            criterion_refs, criteria_values, token_context
        )


def _to_wire_keys(patch: Mapping[str, Any]) -> dict[str, Any]:
    """Accept snake_case keys in overrides by mapping them to wire names."""
    fields = ProofSpec.model_fields
    return {
        (fields[key].alias or key) if key in fields else key: value
        for key, value in patch.items()
    }


def _resolve_operand(
    template: str, token_context: TokenContext, missing_default: bool = False
) -> Any:
    """Resolve one side of an override condition; MISSING for an unset criterion."""
    try:
        if missing_default:
            return resolve_tokens_with_missing_default(template, token_context)
        return resolve_tokens(template, token_context)
    except InvalidTokenError as e:
        if isinstance(e, TokenRecursionError) or not _is_unset_criterion(e.token, token_context):
            raise
        return MISSING


def _is_unset_criterion(token: str, token_context: TokenContext) -> bool:
    """True for {{criteria.name}} when name has no entry in the criteria scope."""
    parts = token[2:-2].strip().split(".")
    criteria = token_context.get("criteria")
    return (
        len(parts) == 2
        and parts[0] == "criteria"
        and isinstance(criteria, Mapping)
        and parts[1] not in criteria
    )

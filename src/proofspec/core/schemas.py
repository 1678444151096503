"""
proofspec Core Schemas

Pydantic models for the declarative configuration (the JSON wire contract)
and for the render-ready structures the engine produces.

Key Design Principles:
1. Configuration models are frozen; the engine never mutates them
2. Field names are snake_case in Python and camelCase on the wire
3. Criteria field types are a closed set validated on load
4. Rendered output is built per request and discarded afterwards
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from proofspec.core.enums import (
    CriteriaFieldType,
    DataFormat,
    DataSetResultStatus,
    HypersyncPeriod,
    PageOrientation,
    ProofFieldFormat,
    ProofFieldType,
    ProofFormat,
    ProofTemplate,
)

# Scalar values that may appear in criteria, params and option values
DataValue = str | int | float | bool | None
DataValueMap = dict[str, Any]
HypersyncCriteria = dict[str, Any]


class WireModel(BaseModel):
    """Base for models that travel as camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize using wire names, dropping unset optional values."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class FrozenWireModel(WireModel):
    """Immutable configuration model."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# =============================================================================
# CRITERIA CONFIGURATION
# =============================================================================


class SelectOption(WireModel):
    """One choice in a select control."""

    value: DataValue = None
    label: str | None = None


class CriterionRef(FrozenWireModel):
    """Reference to a criterion and the wizard page it belongs on."""

    name: str
    page: int = Field(default=0, ge=0)


class CriteriaFieldConfig(FrozenWireModel):
    """
    Declarative description of one criteria input.

    Select fields draw their options from `data_set` (projected through
    `value_property`/`label_property`) and/or from `fixed_values`.
    """

    type: CriteriaFieldType
    property: str
    label: str = ""
    is_required: bool | None = None
    placeholder: str | None = None
    default_display_value: str | None = None

    data_set: str | None = None
    data_set_params: DataValueMap | None = None
    value_property: str | None = None
    label_property: str | None = None
    fixed_values: list[SelectOption] | None = None

    @property
    def has_data_set(self) -> bool:
        """True when options are fetched from a data set."""
        return bool(self.data_set and self.value_property and self.label_property)


CriteriaConfig = dict[str, CriteriaFieldConfig]


# =============================================================================
# RENDERED CRITERIA
# =============================================================================


class CriteriaField(WireModel):
    """Render-ready criteria field."""

    name: str
    type: CriteriaFieldType
    label: str
    options: list[SelectOption] = Field(default_factory=list)
    value: Any = None
    placeholder: str | None = None
    is_required: bool | None = None
    is_disabled: bool = False


class CriteriaPage(WireModel):
    """Ordered group of fields shown on one wizard screen."""

    fields: list[CriteriaField] = Field(default_factory=list)
    is_valid: bool = False


class CriteriaMetadata(WireModel):
    """Everything the host needs to render the configuration wizard."""

    pages: list[CriteriaPage]
    period: HypersyncPeriod = HypersyncPeriod.MONTHLY
    use_versioning: bool = False
    suggested_name: str = ""
    description: str = ""
    enable_excel_output: bool = True


class ProofCriterionValue(WireModel):
    """Criterion value as displayed in a generated proof document."""

    name: str
    label: str
    value: Any = None


# =============================================================================
# PROOF SPECIFICATION
# =============================================================================


class Lookup(FrozenWireModel):
    """Auxiliary data set fetched before templates are resolved."""

    name: str
    data_set: str
    data_set_params: DataValueMap | None = None


class ProofField(FrozenWireModel):
    """Column of a proof layout."""

    property: str
    label: str = ""
    width: str | None = None
    type: ProofFieldType | None = None
    format: ProofFieldFormat | None = None


class ProofSpec(FrozenWireModel):
    """Declarative blueprint of one proof document."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
    )

    period: HypersyncPeriod = HypersyncPeriod.MONTHLY
    use_versioning: bool = False
    suggested_name: str = ""
    format: DataFormat = DataFormat.TABULAR
    orientation: PageOrientation | None = None
    title: str = ""
    subtitle: str = ""
    data_set: str
    data_set_params: DataValueMap | None = None
    no_results_message: str | None = None
    lookups: list[Lookup] = Field(default_factory=list)
    fields: list[ProofField] = Field(default_factory=list)
    web_page_url: str | None = None
    auto_layout: bool = False


class OverrideCondition(FrozenWireModel):
    """Two token templates; the override applies when they resolve equal."""

    value: str
    criteria: str


class ProofSpecOverride(FrozenWireModel):
    """Conditional patch applied on top of the base specification."""

    condition: OverrideCondition
    # Partial spec in wire form; keys replace the running spec's keys
    proof_spec: dict[str, Any] = Field(default_factory=dict)


class ProofTypeDefinition(FrozenWireModel):
    """Complete declarative proof type."""

    description: str = ""
    criteria: list[CriterionRef] = Field(default_factory=list)
    proof_spec: ProofSpec
    overrides: list[ProofSpecOverride] = Field(default_factory=list)


class ProofTypeConfig(FrozenWireModel):
    """Entry for a declarative proof type in proofTypes.json."""

    label: str
    category: str | None = None
    criteria: DataValueMap | None = None
    definition: ProofTypeDefinition | None = None


# =============================================================================
# SYNC INPUTS
# =============================================================================


class UserContext(WireModel):
    """Localization preferences of the user the proof is collected for."""

    time_zone: str | None = None
    language: str | None = None
    locale: str | None = None


class HypersyncSettings(WireModel):
    """Saved configuration of one sync."""

    name: str
    criteria: HypersyncCriteria = Field(default_factory=dict)
    proof_format: ProofFormat = ProofFormat.PDF
    period: HypersyncPeriod = HypersyncPeriod.MONTHLY
    use_versioning: bool = False


class Hypersync(WireModel):
    """A configured proof collection job."""

    id: str | None = None
    settings: HypersyncSettings


# =============================================================================
# DATA SOURCE RESULT
# =============================================================================


class DataSetResult(WireModel):
    """
    Result of a data source fetch.

    `delay`, `max_retry` and `metadata` are only meaningful while pending.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    status: DataSetResultStatus
    data: Any = None
    next_page: str | None = None
    context: dict[str, Any] | None = None
    api_url: str | None = None
    source: str | None = None
    metadata: Any = None
    delay: float | None = None
    max_retry: int | None = None


# =============================================================================
# PROOF DOCUMENT
# =============================================================================


class ProofLayoutField(WireModel):
    """Column in a rendered layout; `type` is omitted for text."""

    property: str
    label: str
    width: str | None = None
    type: ProofFieldType | None = None
    format: ProofFieldFormat | None = None


class ProofLayout(WireModel):
    """Top-level layout of a proof document."""

    format: DataFormat
    fields: list[ProofLayoutField] = Field(default_factory=list)
    no_results_message: str = ""


class ProofContents(WireModel):
    """Contents of a generated proof document."""

    type: str
    title: str
    subtitle: str
    source: str | None = None
    web_page_url: str | None = None
    orientation: PageOrientation | None = None
    zoom: float = 1
    user_time_zone: str | None = None
    criteria: list[ProofCriterionValue] = Field(default_factory=list)
    proof_format: ProofFormat
    template: ProofTemplate = ProofTemplate.UNIVERSAL
    layout: ProofLayout
    proof: list[dict[str, Any]] = Field(default_factory=list)
    authorized_user: str
    collector: str
    collected_on: str


class ProofFile(WireModel):
    """One generated proof document."""

    filename: str
    contents: ProofContents


class ProofDataResponse(WireModel):
    """
    Proof generation result.

    A pending response carries no documents, only the continuation state the
    caller needs to re-invoke the build.
    """

    data: list[ProofFile] = Field(default_factory=list)
    next_page: str | None = None
    combine: bool | None = None
    status: DataSetResultStatus | None = None
    metadata: Any = None
    delay: float | None = None
    max_retry: int | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == DataSetResultStatus.PENDING


class SchemaField(WireModel):
    """Field description used by automated testing of a sync."""

    property: str
    label: str
    type: ProofFieldType = ProofFieldType.TEXT


class ProofSchema(WireModel):
    """Schema generated from a configured proof type."""

    format: DataFormat
    is_hierarchical: bool = False
    fields: list[SchemaField] = Field(default_factory=list)


class SyncPlan(WireModel):
    """How the host should run a multi-page sync."""

    combine: bool = True

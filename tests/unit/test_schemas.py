"""
Unit Tests for Core Schemas

Tests wire naming, validation rules and value comparison.
"""

from datetime import date

import pytest
from pydantic import ValidationError

from proofspec.core.compare import collation_key, compare_values, sort_by
from proofspec.core.enums import (
    CriteriaFieldType,
    DataSetResultStatus,
    ProofFieldFormat,
    ProofFieldType,
)
from proofspec.core.exceptions import (
    ConfigurationError,
    InvalidTokenError,
    ProofSpecError,
    RequestError,
    UnknownProofTypeError,
)
from proofspec.core.schemas import (
    CriteriaFieldConfig,
    CriterionRef,
    DataSetResult,
    ProofField,
    ProofSpec,
    ProofTypeDefinition,
    SelectOption,
)


class TestWireNames:
    """Tests for camelCase aliases."""

    def test_accepts_camel_and_snake_case(self) -> None:
        """Models validate from either naming."""
        camel = DataSetResult.model_validate({"status": "complete", "nextPage": "p2"})
        snake = DataSetResult(status=DataSetResultStatus.COMPLETE, next_page="p2")
        assert camel.next_page == snake.next_page == "p2"

    def test_to_wire_uses_aliases_and_drops_none(self) -> None:
        """Serialization is camelCase without unset optionals."""
        field = ProofField(property="usage", type=ProofFieldType.NUMBER, format=ProofFieldFormat.PERCENT)
        assert field.to_wire() == {
            "property": "usage",
            "label": "",
            "type": "number",
            "format": "percent",
        }

    def test_select_option_keeps_falsy_values(self) -> None:
        """Zero and False are legitimate option values."""
        assert SelectOption(value=0, label="Zero").value == 0
        assert SelectOption(value=False, label="No").value is False


class TestValidation:
    """Tests for configuration validation."""

    def test_config_models_are_frozen(self) -> None:
        """Loaded configuration cannot be modified."""
        ref = CriterionRef(name="group")
        with pytest.raises(ValidationError):
            ref.name = "other"

    def test_negative_page_rejected(self) -> None:
        """Page indexes start at zero."""
        with pytest.raises(ValidationError):
            CriterionRef(name="group", page=-1)

    def test_criteria_field_config(self) -> None:
        """Select fields carry their data set wiring."""
        config = CriteriaFieldConfig.model_validate(
            {
                "type": "select",
                "property": "group",
                "label": "Group",
                "dataSet": "groups",
                "valueProperty": "id",
                "labelProperty": "name",
            }
        )
        assert config.type == CriteriaFieldType.SELECT
        assert config.value_property == "id"

    def test_proof_spec_requires_data_set(self) -> None:
        """dataSet is the one required proof spec key."""
        with pytest.raises(ValidationError):
            ProofSpec.model_validate({"title": "x"})

    def test_definition_defaults(self) -> None:
        """Criteria and overrides default to empty."""
        definition = ProofTypeDefinition.model_validate({"proofSpec": {"dataSet": "users"}})
        assert definition.criteria == []
        assert definition.overrides == []
        assert definition.proof_spec.auto_layout is False


class TestCompareValues:
    """Tests for the sort comparator."""

    def test_strings_ignore_case_and_accents(self) -> None:
        """Base-strength collation."""
        assert compare_values("apple", "Apple") == 0
        assert compare_values("Äpple", "apple") == 0
        assert compare_values("apple", "Banana") < 0
        assert collation_key("Éclair") == "eclair"

    def test_numbers_dates_and_booleans(self) -> None:
        """Non-string values compare naturally."""
        assert compare_values(2, 10) < 0
        assert compare_values(date(2024, 1, 2), date(2024, 1, 1)) > 0
        assert compare_values(True, False) < 0

    def test_none_sorts_last(self) -> None:
        """Blank values go after everything else."""
        assert sort_by([None, "b", "a"], lambda v: v) == ["a", "b", None]

    def test_sort_is_stable(self) -> None:
        """Equal keys keep their input order."""
        items = [("apple", 1), ("Apple", 2), ("APPLE", 3)]
        assert sort_by(items, lambda item: item[0]) == items


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_details_in_message(self) -> None:
        """Details are appended to the string form."""
        error = ProofSpecError("Broken", {"key": "value"})
        assert str(error) == "Broken | Details: {'key': 'value'}"
        assert str(ProofSpecError("Plain")) == "Plain"

    def test_layers(self) -> None:
        """Client errors and configuration errors are distinct layers."""
        assert issubclass(UnknownProofTypeError, RequestError)
        assert not issubclass(UnknownProofTypeError, ConfigurationError)
        assert issubclass(InvalidTokenError, ProofSpecError)
        assert RequestError("bad").status_code == 400

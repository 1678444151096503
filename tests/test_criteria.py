"""
Tests for the criteria layer.

Tests:
1. CriteriaFieldBuilder options and field rendering
2. CriteriaPageAssembler disable chain and page validity
3. JsonCriteriaProvider configuration and proof criteria
"""

import pytest

from proofspec.core.constants import ID_ALL
from proofspec.core.enums import CriteriaFieldType
from proofspec.core.exceptions import (
    DuplicateCriteriaFieldError,
    InvalidDataSetError,
    PendingCriteriaDataError,
    UnknownCriterionError,
    UnsupportedFieldTypeError,
)
from proofspec.core.schemas import CriteriaFieldConfig, CriteriaPage, CriterionRef
from proofspec.criteria import CriteriaFieldBuilder, JsonCriteriaProvider
from proofspec.tokens import init_token_context


@pytest.fixture
def token_context(sample_messages):
    return init_token_context({}, sample_messages)


def refs(*names, page=0):
    return [CriterionRef(name=name, page=page) for name in names]


# ============================================================================
# FIELD BUILDER
# ============================================================================


class TestCriteriaFieldBuilder:
    """Tests for CriteriaFieldBuilder."""

    def test_fixed_values_precede_sorted_options(
        self, criteria_provider, token_context, run_async
    ):
        """Fixed values come first; data set options sort case-insensitively."""
        config = criteria_provider.get_config()["group"]
        field = run_async(criteria_provider.field_builder.build(config, {}, token_context))

        assert [(o.value, o.label) for o in field.options] == [
            (ID_ALL, "All Groups"),
            ("g1", "Admins"),
            ("g2", "engineering"),
        ]
        assert field.name == "group"
        assert field.type == CriteriaFieldType.SELECT
        assert field.is_required is True
        assert field.is_disabled is False

    def test_disabled_field_has_no_options(
        self, criteria_provider, sample_data_source, token_context, run_async
    ):
        """Disabled fields skip the option fetch."""
        config = criteria_provider.get_config()["group"]
        field = run_async(
            criteria_provider.field_builder.build(config, {}, token_context, is_disabled=True)
        )
        assert field.options == []
        assert field.is_disabled is True
        assert sample_data_source.calls_for("groups") == []

    def test_text_field(self, criteria_provider, token_context, run_async):
        """Text fields carry the raw value and a placeholder."""
        config = criteria_provider.get_config()["note"]
        field = run_async(
            criteria_provider.field_builder.build(config, {"note": "hello"}, token_context)
        )
        assert field.options == []
        assert field.value == "hello"
        assert field.placeholder == "Optional note"

    def test_params_resolve_against_criteria(self, make_data_source, run_async):
        """Data set params see the current criteria values."""
        source = make_data_source({"repos": {"status": "complete", "data": []}})
        config = CriteriaFieldConfig(
            type=CriteriaFieldType.SELECT,
            property="repo",
            data_set="repos",
            data_set_params={"org": "{{criteria.org}}", "limit": 10},
            value_property="id",
            label_property="name",
        )
        builder = CriteriaFieldBuilder(source)
        run_async(builder.get_options(config, {"org": "acme"}, init_token_context({})))

        assert source.calls[0]["params"] == {"org": "acme", "limit": 10}
        assert config.data_set_params == {"org": "{{criteria.org}}", "limit": 10}

    def test_options_collected_across_pages(self, make_data_source, run_async):
        """Every page of an option data set is used."""
        pages = {
            None: {"status": "complete", "data": [{"id": 2, "name": "b"}], "nextPage": "p2"},
            "p2": {"status": "complete", "data": [{"id": 1, "name": "A"}]},
        }
        source = make_data_source({"repos": lambda params, page, metadata: pages[page]})
        config = CriteriaFieldConfig(
            type=CriteriaFieldType.SELECT,
            property="repo",
            data_set="repos",
            value_property="id",
            label_property="name",
        )
        options = run_async(CriteriaFieldBuilder(source).get_options(config, {}, {}))
        assert [o.value for o in options] == [1, 2]

    def test_pending_option_data_raises(self, make_data_source, run_async):
        """Option fetches cannot be continued later."""
        source = make_data_source({"repos": {"status": "pending"}})
        config = CriteriaFieldConfig(
            type=CriteriaFieldType.SELECT,
            property="repo",
            data_set="repos",
            value_property="id",
            label_property="name",
        )
        with pytest.raises(PendingCriteriaDataError):
            run_async(CriteriaFieldBuilder(source).get_options(config, {}, {}))

    def test_non_list_option_data_raises(self, make_data_source, run_async):
        """Option data must be a list of objects."""
        source = make_data_source({"repos": {"status": "complete", "data": {"id": 1}}})
        config = CriteriaFieldConfig(
            type=CriteriaFieldType.SELECT,
            property="repo",
            data_set="repos",
            value_property="id",
            label_property="name",
        )
        with pytest.raises(InvalidDataSetError):
            run_async(CriteriaFieldBuilder(source).get_options(config, {}, {}))


# ============================================================================
# PAGE ASSEMBLER
# ============================================================================


class TestCriteriaPageAssembler:
    """Tests for laying out criteria on wizard pages."""

    def test_no_criteria_marks_last_page_valid(self, criteria_provider, run_async):
        """With nothing to ask, the wizard is complete."""
        pages = [CriteriaPage(), CriteriaPage()]
        run_async(criteria_provider.generate_criteria_fields([], {}, {}, pages))
        assert pages[-1].is_valid is True
        assert pages[0].is_valid is False
        assert all(page.fields == [] for page in pages)

    def test_no_criteria_and_no_pages(self, criteria_provider, run_async):
        """An empty page list gets a single valid page."""
        pages = []
        run_async(criteria_provider.generate_criteria_fields([], {}, {}, pages))
        assert len(pages) == 1
        assert pages[0].is_valid is True

    def test_pages_grow_to_referenced_index(
        self, criteria_provider, token_context, run_async
    ):
        """Missing pages are appended empty and invalid."""
        pages = [CriteriaPage()]
        run_async(
            criteria_provider.generate_criteria_fields(
                [CriterionRef(name="note", page=2)], {}, token_context, pages
            )
        )
        assert len(pages) == 3
        assert pages[1].fields == [] and pages[1].is_valid is False
        assert [f.name for f in pages[2].fields] == ["note"]
        assert pages[2].is_valid is True

    def test_required_field_without_value_is_invalid(
        self, criteria_provider, token_context, run_async
    ):
        """A required field blocks its page until it has a value."""
        pages = [CriteriaPage()]
        run_async(
            criteria_provider.generate_criteria_fields(
                refs("group"), {}, token_context, pages
            )
        )
        assert pages[0].is_valid is False

        pages = [CriteriaPage()]
        run_async(
            criteria_provider.generate_criteria_fields(
                refs("group"), {"group": "g1"}, token_context, pages
            )
        )
        assert pages[0].is_valid is True

    def test_disable_chain_is_monotonic(
        self, criteria_provider, sample_data_source, token_context, run_async
    ):
        """Once a field has no value, every later field is disabled."""
        pages = [CriteriaPage()]
        run_async(
            criteria_provider.generate_criteria_fields(
                refs("group", "status", "note"), {}, token_context, pages
            )
        )
        fields = pages[0].fields
        assert [f.is_disabled for f in fields] == [False, True, True]
        assert fields[1].options == [] and fields[2].options == []
        assert pages[0].is_valid is False

    def test_stale_later_value_stays_disabled(self, criteria_provider, token_context, run_async):
        """A value left on a later field does not re-enable it after an unset one."""
        pages = [CriteriaPage()]
        run_async(
            criteria_provider.generate_criteria_fields(
                refs("group", "status", "note"), {"status": "active"}, token_context, pages
            )
        )
        fields = pages[0].fields
        assert [f.is_disabled for f in fields] == [False, True, True]
        assert fields[2].options == []
        assert pages[0].is_valid is False

    def test_value_enables_next_field(self, criteria_provider, token_context, run_async):
        """Each field only depends on the one declared before it."""
        pages = [CriteriaPage()]
        run_async(
            criteria_provider.generate_criteria_fields(
                refs("group", "status", "note"), {"group": "g1"}, token_context, pages
            )
        )
        fields = pages[0].fields
        assert [f.is_disabled for f in fields] == [False, False, True]
        assert [o.value for o in fields[1].options] == ["active", "suspended"]

    def test_validity_across_pages(self, criteria_provider, token_context, run_async):
        """Optional fields on a later page are valid once enabled."""
        pages = [CriteriaPage()]
        refs_ = [CriterionRef(name="group", page=0), CriterionRef(name="status", page=1)]
        run_async(
            criteria_provider.generate_criteria_fields(
                refs_, {"group": "g1"}, token_context, pages
            )
        )
        assert [p.is_valid for p in pages] == [True, True]

    def test_unknown_criterion(self, criteria_provider, run_async):
        """Unconfigured criteria are a configuration error."""
        with pytest.raises(UnknownCriterionError):
            run_async(
                criteria_provider.generate_criteria_fields(refs("nope"), {}, {}, [CriteriaPage()])
            )

    def test_unsupported_field_type(self, make_data_source, run_async):
        """Field types other than select and text are rejected."""
        bad = CriteriaFieldConfig.model_construct(type="date", property="when")
        provider = JsonCriteriaProvider(None, make_data_source(), criteria_fields={"when": bad})
        with pytest.raises(UnsupportedFieldTypeError):
            run_async(provider.generate_criteria_fields(refs("when"), {}, {}, [CriteriaPage()]))


# ============================================================================
# JSON CRITERIA PROVIDER
# ============================================================================


class TestJsonCriteriaProvider:
    """Tests for JsonCriteriaProvider."""

    def test_loads_config_without_schema_key(self, criteria_provider):
        """The $schema entry is not a criterion."""
        config = criteria_provider.get_config()
        assert set(config) == {"proofCategory", "group", "status", "note"}

    def test_missing_config_dir_is_empty(self, tmp_path, make_data_source):
        """No criteriaFields.json means no criteria."""
        provider = JsonCriteriaProvider(tmp_path, make_data_source())
        assert provider.get_config() == {}

    def test_add_criteria_field(self, criteria_provider):
        """New fields are added; duplicates are rejected."""
        config = CriteriaFieldConfig(type=CriteriaFieldType.TEXT, property="ticket")
        criteria_provider.add_criteria_field("ticket", config)
        assert criteria_provider.get_config()["ticket"] is config

        with pytest.raises(DuplicateCriteriaFieldError):
            criteria_provider.add_criteria_field("group", config)

    def test_proof_category_field(self, criteria_provider, token_context, run_async):
        """The category field is built from its configuration."""
        field = run_async(
            criteria_provider.generate_proof_category_field(
                {"proofCategory": "access"}, token_context
            )
        )
        assert field.name == "proofCategory"
        assert field.value == "access"
        assert [o.value for o in field.options] == ["access", "security"]

    def test_no_proof_category_field(self, make_data_source, run_async):
        """Without configuration there is no category field."""
        provider = JsonCriteriaProvider(None, make_data_source())
        assert run_async(provider.generate_proof_category_field({}, {})) is None

    def test_proof_criteria_for_unset_optionals(
        self, criteria_provider, token_context, run_async
    ):
        """Unset optional criteria show their default display value."""
        values = {"group": "g1"}
        criteria = run_async(
            criteria_provider.generate_proof_criteria(
                refs("group", "status", "note"), values, token_context
            )
        )
        assert [(c.name, c.label, c.value) for c in criteria] == [
            ("group", "Group", "Admins"),
            ("status", "Status", "Any status"),
            ("note", "Note", ""),
        ]

    def test_proof_criteria_with_values(self, criteria_provider, token_context, run_async):
        """Select values show their option label; text values pass through."""
        values = {"group": ID_ALL, "status": "suspended", "note": "quarterly review"}
        criteria = run_async(
            criteria_provider.generate_proof_criteria(
                refs("group", "status", "note"), values, token_context
            )
        )
        assert [c.value for c in criteria] == ["All Groups", "Suspended", "quarterly review"]

    def test_proof_criteria_unknown_criterion(self, criteria_provider, run_async):
        """Proof criteria for an unconfigured name are a configuration error."""
        with pytest.raises(UnknownCriterionError):
            run_async(criteria_provider.generate_proof_criteria(refs("nope"), {}, {}))

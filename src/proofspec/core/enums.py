"""
proofspec Core Enumerations

This module defines all enumerations used throughout the engine.
Values are the strings used in the declarative JSON configuration.
"""

from enum import Enum


class CriteriaFieldType(str, Enum):
    """Input controls a criteria field can render as."""

    SELECT = "select"
    TEXT = "text"


SUPPORTED_CRITERIA_FIELD_TYPES = frozenset({CriteriaFieldType.SELECT, CriteriaFieldType.TEXT})


class DataSetResultStatus(str, Enum):
    """Outcome of a data source fetch."""

    PENDING = "pending"
    COMPLETE = "complete"


class HypersyncPeriod(str, Enum):
    """How often a proof is collected."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class DataFormat(str, Enum):
    """Shape of the proof layout."""

    TABULAR = "tabular"
    STACKED = "stacked"
    HIERARCHICAL = "hierarchical"


class ProofFieldType(str, Enum):
    """Column types in a proof layout."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"


class ProofFieldFormat(str, Enum):
    """Display formats for proof field values."""

    PERCENT = "percent"


class PageOrientation(str, Enum):
    """Page orientation of a rendered proof."""

    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class ProofFormat(str, Enum):
    """Output artifact format."""

    PDF = "pdf"
    EXCEL = "excel"


class ProofTemplate(str, Enum):
    """Renderer template for the proof contents."""

    UNIVERSAL = "universal"

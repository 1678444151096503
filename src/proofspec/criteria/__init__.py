"""
proofspec Criteria Layer

Builds criteria fields and lays them out on configuration wizard pages.
"""

from proofspec.criteria.fields import CriteriaFieldBuilder
from proofspec.criteria.pages import CriteriaPageAssembler
from proofspec.criteria.provider import CriteriaProvider, JsonCriteriaProvider

__all__ = [
    "CriteriaFieldBuilder",
    "CriteriaPageAssembler",
    "CriteriaProvider",
    "JsonCriteriaProvider",
]

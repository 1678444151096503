"""
proofspec

Declarative proof-generation engine: configuration wizards and proof
documents driven by JSON proof type definitions.
"""

__version__ = "0.1.0"
__author__ = "proofspec Team"

from proofspec.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]

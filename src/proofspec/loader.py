"""
Configuration Loader

Reads the declarative JSON configuration of a connector and validates it
into immutable models. Layout of a configuration directory:

    criteriaFields.json      criterion name -> criteria field config
    proofTypes.json          proof type -> {label, category, criteria, definition?}
    proofs/<proofType>.json  definition of a declarative proof type
    messages.json            message key -> text, available as {{messages.*}}
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from proofspec.core.exceptions import ConfigurationError, DefinitionNotFoundError
from proofspec.core.schemas import CriteriaFieldConfig, ProofTypeConfig, ProofTypeDefinition

logger = logging.getLogger(__name__)

CRITERIA_FIELDS_FILE = "criteriaFields.json"
PROOF_TYPES_FILE = "proofTypes.json"
MESSAGES_FILE = "messages.json"
PROOFS_DIR = "proofs"
SCHEMA_KEY = "$schema"


def load_json(path: Path) -> Any:
    """Read a JSON document, raising ConfigurationError on malformed input."""
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Malformed JSON in {path.name}", {"path": str(path), "error": str(e)}
        ) from e


def _load_map(path: Path) -> dict[str, Any]:
    if not path.exists():
        logger.debug(f"[Loader] {path} not found, using empty configuration")
        return {}
    document = load_json(path)
    if not isinstance(document, dict):
        raise ConfigurationError(
            f"{path.name} must contain a JSON object", {"path": str(path)}
        )
    # A JSON schema reference is not an entry
    document.pop(SCHEMA_KEY, None)
    return document


def _validate(model: type[BaseModel], name: str, value: Any, path: Path) -> Any:
    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid entry '{name}' in {path.name}",
            {"path": str(path), "errors": e.errors(include_url=False, include_context=False)},
        ) from e


def load_criteria_fields(config_dir: Path) -> dict[str, CriteriaFieldConfig]:
    """Load criteriaFields.json; an absent file is an empty configuration."""
    path = Path(config_dir) / CRITERIA_FIELDS_FILE
    return {
        name: _validate(CriteriaFieldConfig, name, value, path)
        for name, value in _load_map(path).items()
    }


def load_proof_types(config_dir: Path) -> dict[str, ProofTypeConfig]:
    """Load proofTypes.json; an absent file means no declarative proof types."""
    path = Path(config_dir) / PROOF_TYPES_FILE
    return {
        name: _validate(ProofTypeConfig, name, value, path)
        for name, value in _load_map(path).items()
    }


def load_messages(config_dir: Path) -> dict[str, str]:
    """Load messages.json; an absent file means no messages."""
    path = Path(config_dir) / MESSAGES_FILE
    return {key: str(value) for key, value in _load_map(path).items()}


def load_definition(config_dir: Path, proof_type: str) -> ProofTypeDefinition:
    """Load proofs/<proof_type>.json."""
    path = Path(config_dir) / PROOFS_DIR / f"{proof_type}.json"
    if not path.exists():
        raise DefinitionNotFoundError(proof_type, str(path))
    document = load_json(path)
    if isinstance(document, dict):
        document.pop(SCHEMA_KEY, None)
    return _validate(ProofTypeDefinition, proof_type, document, path)

"""
Proof-Type Registry

Maps proof type keys to either a code handler class or a declarative JSON
entry. The map is built once at startup and read-only afterwards.

Usage:
    registry = ProofTypeRegistry.from_config_dir(Path("json"), [TaskAuditProvider])
    options = registry.get_options({"hp_proofCategory": "security"})
    provider = registry.create("userAccess", data_source, criteria_provider)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from proofspec.config import get_settings
from proofspec.core.compare import sort_by
from proofspec.core.exceptions import DuplicateProofTypeError, UnknownProofTypeError
from proofspec.core.schemas import ProofTypeConfig, ProofTypeDefinition, SelectOption
from proofspec.criteria.provider import CriteriaProvider
from proofspec.datasource import DataSource
from proofspec.loader import load_definition, load_messages, load_proof_types
from proofspec.proofs.provider import DeclarativeProofProvider, ProofProvider
from proofspec.tokens import resolve_tokens

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandlerEntry:
    """Proof type implemented in code."""

    handler: type[ProofProvider]

    def matches(self, criteria: Mapping[str, Any] | None, category: str | None) -> bool:
        if criteria is not None and not self.handler.matches_criteria(criteria):
            return False
        return self.handler.matches_category(category)

    def label(self, messages: Mapping[str, str]) -> str:
        return self.handler.proof_type_label


@dataclass(frozen=True)
class DeclarativeEntry:
    """Proof type defined in proofTypes.json."""

    config: ProofTypeConfig

    def matches(self, criteria: Mapping[str, Any] | None, category: str | None) -> bool:
        if category is not None and self.config.category not in (None, category):
            return False
        if criteria is None or not self.config.criteria:
            return True
        return all(criteria.get(key) == value for key, value in self.config.criteria.items())

    def label(self, messages: Mapping[str, str]) -> str:
        return resolve_tokens(self.config.label, {"messages": messages})


RegistryEntry = HandlerEntry | DeclarativeEntry


class ProofTypeRegistry:
    """Registry and dispatcher of the proof types a connector offers."""

    def __init__(
        self,
        proof_types: Mapping[str, ProofTypeConfig] | None = None,
        handlers: Iterable[type[ProofProvider]] = (),
        messages: Mapping[str, str] | None = None,
        config_dir: Path | None = None,
        connector_name: str | None = None,
    ) -> None:
        """
        Args:
            proof_types: Declarative entries keyed by proof type.
            handlers: Code handler classes; each must set `proof_type`.
            messages: Messages available to labels as {{messages.*}}.
            config_dir: Directory holding proofs/<type>.json definitions.
            connector_name: Collector name written into proof documents.

        Raises:
            DuplicateProofTypeError: A handler uses a key that is already registered.
        """
        settings = get_settings()
        self.messages = dict(messages or {})
        self.config_dir = Path(config_dir) if config_dir is not None else settings.engine.config_dir
        self.connector_name = connector_name or settings.engine.connector_name
        self._definitions: dict[str, ProofTypeDefinition] = {}

        self._entries: dict[str, RegistryEntry] = {
            key: DeclarativeEntry(config) for key, config in (proof_types or {}).items()
        }
        for handler in handlers:
            if handler.proof_type in self._entries:
                raise DuplicateProofTypeError(handler.proof_type)
            self._entries[handler.proof_type] = HandlerEntry(handler)

        logger.info(f"[Registry] Registered {len(self._entries)} proof types")

    @classmethod
    def from_config_dir(
        cls,
        config_dir: Path | None = None,
        handlers: Iterable[type[ProofProvider]] = (),
        connector_name: str | None = None,
    ) -> ProofTypeRegistry:
        """Build a registry from proofTypes.json and messages.json."""
        config_dir = Path(config_dir) if config_dir is not None else get_settings().engine.config_dir
        return cls(
            proof_types=load_proof_types(config_dir),
            handlers=handlers,
            messages=load_messages(config_dir),
            config_dir=config_dir,
            connector_name=connector_name,
        )

    @property
    def entries(self) -> Mapping[str, RegistryEntry]:
        return self._entries

    def get_options(
        self, criteria: Mapping[str, Any] | None = None, category: str | None = None
    ) -> list[SelectOption]:
        """
        Proof types to offer for the criteria (and category) chosen so far,
        sorted by label.
        """
        options = [
            SelectOption(value=key, label=entry.label(self.messages))
            for key, entry in self._entries.items()
            if entry.matches(criteria, category)
        ]
        return sort_by(options, lambda option: option.label)

    def get_custom_proof_type_categories(self) -> list[str]:
        """Categories declared by declarative entries, in first-seen order."""
        categories: list[str] = []
        for entry in self._entries.values():
            if isinstance(entry, DeclarativeEntry) and entry.config.category:
                if entry.config.category not in categories:
                    categories.append(entry.config.category)
        return categories

    async def get_definition(self, proof_type: str) -> ProofTypeDefinition:
        """Definition of a declarative proof type, loaded on first use."""
        entry = self._entries.get(proof_type)
        if not isinstance(entry, DeclarativeEntry):
            raise UnknownProofTypeError(proof_type)
        if entry.config.definition is not None:
            return entry.config.definition
        if proof_type not in self._definitions:
            logger.debug(f"[Registry] Loading definition for {proof_type}")
            self._definitions[proof_type] = load_definition(self.config_dir, proof_type)
        return self._definitions[proof_type]

    def create(
        self, proof_type: str, data_source: DataSource, criteria_provider: CriteriaProvider
    ) -> ProofProvider:
        """
        Instantiate the provider for a proof type.

        Raises:
            UnknownProofTypeError: proof_type is not registered (a client error).
        """
        entry = self._entries.get(proof_type)
        if entry is None:
            raise UnknownProofTypeError(proof_type)

        if isinstance(entry, HandlerEntry):
            return entry.handler(data_source, criteria_provider)

        async def get_definition() -> ProofTypeDefinition:
            return await self.get_definition(proof_type)

        return DeclarativeProofProvider(
            proof_type,
            data_source,
            criteria_provider,
            self.messages,
            get_definition,
            connector_name=self.connector_name,
        )


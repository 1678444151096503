#!/usr/bin/env python3
"""
Validate a connector's declarative configuration.

Loads criteriaFields.json, proofTypes.json, messages.json and every
declarative proof definition, then prints each proof type with its
criteria. Exits with status 1 on the first configuration error.

Usage:
    pip install -e .
    python scripts/validate_config.py                 # → $PROOFSPEC_CONFIG_DIR
    python scripts/validate_config.py --config-dir json
"""

import argparse
import asyncio
import sys
from pathlib import Path

from proofspec.config import get_settings
from proofspec.core.exceptions import ConfigurationError, UnknownCriterionError
from proofspec.loader import load_criteria_fields
from proofspec.observability import configure_logging
from proofspec.proofs import DeclarativeEntry, ProofTypeRegistry


async def validate(config_dir: Path) -> int:
    """Print the proof types in config_dir; return the number of proof types."""
    criteria_fields = load_criteria_fields(config_dir)
    registry = ProofTypeRegistry.from_config_dir(config_dir)

    print(f"📁 {config_dir}")
    print(f"   Criteria fields: {len(criteria_fields)}")

    for option in registry.get_options():
        entry = registry.entries[option.value]
        category = entry.config.category if isinstance(entry, DeclarativeEntry) else None
        print(f"\n   {option.value}: {option.label}" + (f" [{category}]" if category else ""))

        definition = await registry.get_definition(option.value)
        for ref in definition.criteria:
            if ref.name not in criteria_fields:
                raise UnknownCriterionError(ref.name)
            print(f"     page {ref.page}: {ref.name}")
        print(f"     dataSet: {definition.proof_spec.data_set}")

    return len(registry.entries)


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate proofspec configuration")
    parser.add_argument(
        "--config-dir",
        "-c",
        type=Path,
        help="Configuration directory (default: PROOFSPEC_CONFIG_DIR)",
    )
    args = parser.parse_args()

    configure_logging()
    config_dir = args.config_dir or get_settings().engine.config_dir

    try:
        count = asyncio.run(validate(config_dir))
    except ConfigurationError as e:
        print(f"\n❌ {e}", file=sys.stderr)
        return 1

    print(f"\n✅ {count} proof types valid")
    return 0


if __name__ == "__main__":
    sys.exit(main())

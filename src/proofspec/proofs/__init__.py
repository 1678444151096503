"""
proofspec Proofs Layer

Composes proof specifications, builds proof documents and dispatches
proof types to their providers.
"""

from proofspec.proofs.builder import ProofDocumentBuilder
from proofspec.proofs.composer import ProofSpecComposer
from proofspec.proofs.layout import calc_layout_info
from proofspec.proofs.provider import DeclarativeProofProvider, ProofProvider
from proofspec.proofs.registry import DeclarativeEntry, HandlerEntry, ProofTypeRegistry

__all__ = [
    # Composition
    "ProofSpecComposer",
    "ProofDocumentBuilder",
    "calc_layout_info",
    # Providers
    "ProofProvider",
    "DeclarativeProofProvider",
    # Registry
    "ProofTypeRegistry",
    "HandlerEntry",
    "DeclarativeEntry",
]

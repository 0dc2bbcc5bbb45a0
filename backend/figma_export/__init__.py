"""
Figma Export Module

Parses Figma links and renders nodes to PNG through the Figma images API.

Features:
- Order-independent file key / node id extraction
- Single-attempt export resolution with typed failures
- Storage key derivation from the export URL
"""

from .identifiers import derive_key, extract_identifiers
from .models import ExportDescriptor, ExportResult, FailureKind, FigmaIdentifiers
from .resolver import FigmaExportResolver

__all__ = [
    "extract_identifiers",
    "derive_key",
    "FigmaIdentifiers",
    "ExportDescriptor",
    "ExportResult",
    "FailureKind",
    "FigmaExportResolver",
]

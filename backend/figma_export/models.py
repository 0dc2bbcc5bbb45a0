"""
Data models for the Figma export pipeline.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class FigmaIdentifiers:
    """Document key / node id pair extracted from a Figma link."""
    document_key: str      # e.g. "ABC123"
    node_id: str           # e.g. "10-20"


@dataclass(frozen=True)
class ExportDescriptor:
    """Short-lived URL issued by the Figma images API. Never persisted."""
    transient_url: str


class FailureKind(str, Enum):
    """Why an ingestion request stopped."""
    INVALID_REFERENCE = "invalid_reference"          # Link has no file key / node id
    UPSTREAM_EMPTY = "upstream_empty"                # Figma returned no usable export
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"    # Figma or export CDN unreachable
    WRITE_FAILURE = "write_failure"                  # Content or provenance store write failed


@dataclass
class ExportResult:
    """Outcome of a single export request."""
    success: bool
    descriptor: Optional[ExportDescriptor] = None
    failure: Optional[FailureKind] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, transient_url: str) -> "ExportResult":
        return cls(success=True, descriptor=ExportDescriptor(transient_url))

    @classmethod
    def failed(cls, failure: FailureKind, error: str) -> "ExportResult":
        return cls(success=False, failure=failure, error=error)

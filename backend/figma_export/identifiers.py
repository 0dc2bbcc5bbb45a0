"""
Figma link parsing and storage key derivation.

Both functions are pure: no I/O, no exceptions for bad input.
"""

import re
from typing import Optional

from .models import ExportDescriptor, FigmaIdentifiers

# Searched anywhere in the link, first match wins, in any order.
# No percent-decoding: "node-id=10%3A20" is not recognised.
FILE_KEY_PATTERN = re.compile(r"/file/([a-zA-Z0-9]+)")
NODE_ID_PATTERN = re.compile(r"node-id=(\d+-\d+)")

STORAGE_KEY_SUFFIX = ".png"


def extract_identifiers(source_url: str) -> Optional[FigmaIdentifiers]:
    """
    Extract the document key and node id from a Figma link.

    Example:
        >>> extract_identifiers("https://www.figma.com/file/ABC123/Name?node-id=10-20")
        FigmaIdentifiers(document_key='ABC123', node_id='10-20')

    Returns:
        FigmaIdentifiers, or None if either part is missing.
    """
    file_match = FILE_KEY_PATTERN.search(source_url)
    node_match = NODE_ID_PATTERN.search(source_url)

    if not file_match or not node_match:
        return None

    return FigmaIdentifiers(
        document_key=file_match.group(1),
        node_id=node_match.group(1),
    )


def derive_key(descriptor: ExportDescriptor) -> str:
    """Last path segment of the transient export URL plus ".png"."""
    return descriptor.transient_url.rsplit("/", 1)[-1] + STORAGE_KEY_SUFFIX

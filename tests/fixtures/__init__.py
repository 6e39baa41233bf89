"""Test fixtures for Vehicle Makes DB."""

from .fakes import FakeVPICClient, network_error
from .vpic_responses import (
    MAKES_XML,
    MALFORMED_XML,
    NO_TYPES_XML,
    ONE_TYPE_XML,
    SINGLE_MAKE_XML,
    THREE_TYPES_XML,
    makes_document,
    types_document,
)

__all__ = [
    # In-memory collaborators
    "FakeVPICClient",
    "network_error",
    # vPIC documents
    "MAKES_XML",
    "MALFORMED_XML",
    "NO_TYPES_XML",
    "ONE_TYPE_XML",
    "SINGLE_MAKE_XML",
    "THREE_TYPES_XML",
    "makes_document",
    "types_document",
]

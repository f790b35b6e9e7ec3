"""Document validation (structural checks and JSON schema)."""

from .validator import (
    DOCUMENT_SCHEMA_VERSION,
    InvalidDocumentError,
    validate_document,
    validate_document_data,
)

__all__ = [
    "DOCUMENT_SCHEMA_VERSION",
    "InvalidDocumentError",
    "validate_document",
    "validate_document_data",
]

"""Core utilities: JSON serialization of document snapshots."""

from .serialization import document_from_dict, document_to_dict, load_document, save_document

__all__ = [
    "document_from_dict",
    "document_to_dict",
    "load_document",
    "save_document",
]

"""Exceptions raised by ContactPro operations."""
from __future__ import annotations


class ContactError(RuntimeError):
    """Base class for errors reported back to the user."""


class ValidationError(ContactError):
    """Raised when a required contact field is missing."""


class ParseError(ContactError):
    """Raised when an import payload or stored document cannot be parsed."""


class NotFoundError(ContactError):
    """Raised when a contact or the backup snapshot does not exist."""


class ImportInProgressError(ContactError):
    """Raised when an import is started while another one is still running."""

"""
Error types for the Nostr Event Restore Service.

This module defines the exceptions raised while serving a lookup:
- RestoreServiceError: Base exception
- InvalidIdentifierError: The npub could not be decoded
- ArchiveUnavailableError: The archive database failed
- TemplateRenderError: The HTML page could not be rendered

Profile lookups never raise; a relay failure degrades to an empty profile.

Invariants:
    - All errors inherit from RestoreServiceError
    - Messages are safe to show to a viewer; driver errors go to details
"""

from __future__ import annotations

from typing import Any


class RestoreServiceError(Exception):
    """Base exception for all service errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context (logged, never rendered)
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "RESTORE_SERVICE_ERROR"
        self.details = details or {}


class InvalidIdentifierError(RestoreServiceError):
    """The public key identifier is not a valid npub.

    Raised when:
    - The value does not start with npub1
    - The bech32 checksum or characters are invalid
    - The decoded payload is not a 32 byte public key
    """

    def __init__(self, message: str, identifier: str | None = None) -> None:
        super().__init__(
            message,
            code="INVALID_IDENTIFIER",
            details={"identifier": identifier},
        )
        self.identifier = identifier


class ArchiveUnavailableError(RestoreServiceError):
    """The archive database could not answer a query."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(
            message,
            code="ARCHIVE_UNAVAILABLE",
            details={"cause": repr(cause) if cause else None},
        )
        self.cause = cause


class TemplateRenderError(RestoreServiceError):
    """A page template failed to render."""

    def __init__(self, message: str, template: str | None = None) -> None:
        super().__init__(
            message,
            code="TEMPLATE_RENDER_FAILED",
            details={"template": template},
        )
        self.template = template

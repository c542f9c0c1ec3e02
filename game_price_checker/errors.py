"""Exceptions raised by clients and pipelines."""

from __future__ import annotations


class PriceCheckError(Exception):
    """Base class for errors surfaced to the user."""


class ValidationFailure(PriceCheckError):
    """Required user input is missing; nothing has been processed."""


class NetworkFailure(PriceCheckError):
    """A request failed: transport error, non-2xx status, bad JSON or an unsuccessful payload."""

    def __init__(self, message: str, *, context: str = "", status: int | None = None):
        super().__init__(message)
        self.context = context
        self.status = status


class CatalogUnavailable(NetworkFailure):
    """The catalog (or mapping service) could not be loaded, so a run cannot start."""

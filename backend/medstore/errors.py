# Overview: Domain error taxonomy shared by services and routes.

from __future__ import annotations


class MedStoreError(Exception):
    """Base for every failure a store operation reports to its caller."""

    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(MedStoreError):
    """Unknown medicine or transaction id."""

    status_code = 404


class InvalidInputError(MedStoreError, ValueError):
    """400-level input problem (empty items, bad quantity, malformed range)."""

    status_code = 400


class ConflictError(MedStoreError):
    """409-level business rule conflict (e.g., deleting a medicine in use)."""

    status_code = 409


class InsufficientStockError(MedStoreError):
    """A stock movement would drive a medicine's quantity below zero."""

    status_code = 409


class OutOfStockError(InsufficientStockError):
    """Raised by a single stock adjustment that would go negative."""


class PrescriptionRequiredError(MedStoreError):
    """Schedule H item dispensed without a prescription or explicit skip."""

    status_code = 422

# SPDX-License-Identifier: Apache-2.0
"""Custom exception classes."""
from __future__ import annotations


class ResearchBaseError(Exception):
    """Base exception for Africa Research Base."""

    status_code = 500


class ValidationError(ResearchBaseError):
    """Input validation failed."""

    status_code = 400


class NotFoundError(ResearchBaseError):
    """Resource not found."""

    status_code = 404


class PermissionDeniedError(ResearchBaseError):
    """Caller may not act on this resource."""

    status_code = 403


class ConflictError(ResearchBaseError):
    """Resource already exists (duplicate signup, second review of the same dataset)."""

    status_code = 409


class ChainRegistrationError(ResearchBaseError):
    """Solana RPC rejected or failed to accept the registration transaction."""

    status_code = 502

# SPDX-License-Identifier: Apache-2.0
"""SDK-specific exceptions."""


class ResearchBaseSDKError(Exception):
    """Base exception for SDK."""


class APIError(ResearchBaseSDKError):
    """API request failed (HTTP or validation)."""

    def __init__(self, status_code: int, message: str, details: list | None = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.details = details or []

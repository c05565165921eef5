# SPDX-License-Identifier: Apache-2.0
"""Africa Research Base client SDK for API interaction."""
from .client import ResearchBaseClient
from .exceptions import APIError, ResearchBaseSDKError

__all__ = ["APIError", "ResearchBaseClient", "ResearchBaseSDKError"]

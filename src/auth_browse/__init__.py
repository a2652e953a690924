"""auth-browse - authenticated browser automation for UI captures and flows."""

from __future__ import annotations

from auth_browse.browser import AuthenticatedBrowserService
from auth_browse.config import BrowseConfig, get_config, load_config
from auth_browse.errors import AuthBrowseError, BrowserUnavailableError
from auth_browse.identity import BYPASS_HEADERS, TEST_USER
from auth_browse.state import (
    BrowserOptions,
    CaptureResult,
    FlowResult,
    ReadinessOutcome,
    Viewport,
)
from auth_browse.steps import FlowStep, parse_steps

__version__ = "0.1.0"

__all__ = [
    "BYPASS_HEADERS",
    "TEST_USER",
    "AuthBrowseError",
    "AuthenticatedBrowserService",
    "BrowseConfig",
    "BrowserOptions",
    "BrowserUnavailableError",
    "CaptureResult",
    "FlowResult",
    "FlowStep",
    "ReadinessOutcome",
    "Viewport",
    "get_config",
    "load_config",
    "parse_steps",
]

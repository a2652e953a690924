"""Error types for the authenticated browser layer."""

from __future__ import annotations


class AuthBrowseError(RuntimeError):
    """Base error for auth-browse."""


class BrowserUnavailableError(AuthBrowseError):
    """No browser could be obtained, or a context could not be created."""


class FlowStepError(AuthBrowseError):
    """A flow step failed; carries the 1-based step index and action."""

    def __init__(self, index: int, action: str, detail: str) -> None:
        super().__init__(f"step {index} ({action}) failed: {detail}")
        self.index = index
        self.action = action
        self.detail = detail

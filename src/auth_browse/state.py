"""Options and result types for authenticated browser operations."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from auth_browse.identity import TEST_USER, TestUser

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; Playwright Testing Bot)"

CaptureKind = Literal["screenshot", "pdf", "scrape"]

# Key under which each capture kind places its payload in to_dict()
_PAYLOAD_KEYS: dict[str, str] = {
    "screenshot": "screenshot",
    "pdf": "pdf",
    "scrape": "data",
}


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(UTC).isoformat()


class ReadinessOutcome(Enum):
    """Result of waiting for the readiness marker."""

    READY = "ready"
    TIMED_OUT = "timed_out"


class Viewport(BaseModel):
    """Browser viewport size in CSS pixels."""

    width: int = Field(default=1920, gt=0)
    height: int = Field(default=1080, gt=0)

    def to_dict(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}


class BrowserOptions(BaseModel):
    """Per-call options for authenticated operations.

    Accepts snake_case or camelCase keys (``userAgent``, ``bypassAuth``, ...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    viewport: Viewport = Field(default_factory=Viewport)
    user_agent: str = Field(default=DEFAULT_USER_AGENT)
    bypass_auth: bool = Field(
        default=True, description="Capture full-page screenshots when True"
    )
    session_data: Any = Field(default=None, description="Opaque passthrough")
    timeout: int | None = Field(
        default=None, ge=0, description="Readiness-marker timeout override in ms"
    )

    @classmethod
    def coerce(cls, options: BrowserOptions | Mapping[str, Any] | None) -> BrowserOptions:
        """Build options from a model, a mapping, or nothing."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls.model_validate(dict(options))


@dataclass
class CaptureMetadata:
    """Metadata attached to every capture."""

    url: str
    title: str
    user: TestUser = TEST_USER
    viewport_size: dict[str, int] | None = None
    authenticated: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, omitting fields a capture kind does not set."""
        data: dict[str, Any] = {"url": self.url, "title": self.title}
        if self.viewport_size is not None:
            data["viewport_size"] = self.viewport_size
        if self.authenticated is not None:
            data["authenticated"] = self.authenticated
        data["user"] = self.user.to_dict()
        return data


@dataclass
class CaptureResult:
    """Result of a single-shot capture (screenshot, PDF or scrape)."""

    kind: CaptureKind
    payload: str | dict[str, Any]
    metadata: CaptureMetadata
    readiness: ReadinessOutcome = ReadinessOutcome.READY
    warnings: list[str] = field(default_factory=list)
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            _PAYLOAD_KEYS[self.kind]: self.payload,
            "timestamp": self.timestamp,
            "metadata": self.metadata.to_dict(),
            "readiness": self.readiness.value,
            "warnings": list(self.warnings),
        }


@dataclass
class FlowResult:
    """Outcome of a user flow. Logs and screenshots survive a failed step."""

    success: bool
    screenshots: list[str] = field(default_factory=list)
    logs: list[str] = field(default_factory=list)
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "screenshots": list(self.screenshots),
            "logs": list(self.logs),
            "timestamp": self.timestamp,
        }

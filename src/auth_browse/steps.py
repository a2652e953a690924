"""Flow step definitions.

A flow is an ordered list of steps discriminated on ``action``. Raw mappings
(e.g. from JSON or YAML) are validated into step models by ``parse_steps``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError


class _Step(BaseModel):
    model_config = ConfigDict(frozen=True)


class GotoStep(_Step):
    """Navigate to a path on the target application."""

    action: Literal["goto"] = "goto"
    path: str = "/"


class ClickStep(_Step):
    """Click an element. A missing element fails the flow."""

    action: Literal["click"] = "click"
    selector: str


class FillStep(_Step):
    """Fill an input. Skipped when selector or value is missing."""

    action: Literal["fill"] = "fill"
    selector: str | None = None
    value: str | None = None


class ScreenshotStep(_Step):
    """Capture a full-page screenshot into the flow result."""

    action: Literal["screenshot"] = "screenshot"


class WaitStep(_Step):
    """Wait for a selector, or for a flat delay when no selector is given."""

    action: Literal["wait"] = "wait"
    selector: str | None = None
    timeout: int | None = Field(default=None, ge=0)


FlowStep = Annotated[
    GotoStep | ClickStep | FillStep | ScreenshotStep | WaitStep,
    Field(discriminator="action"),
]

_STEPS_ADAPTER: TypeAdapter[list[FlowStep]] = TypeAdapter(list[FlowStep])


def parse_steps(steps: Iterable[FlowStep | Mapping[str, Any]]) -> list[FlowStep]:
    """Validate a sequence of steps, accepting models or raw mappings.

    Raises:
        ValueError: If any step is malformed or names an unknown action.
    """
    raw = [
        step.model_dump() if isinstance(step, BaseModel) else dict(step)
        for step in steps
    ]
    try:
        return _STEPS_ADAPTER.validate_python(raw)
    except ValidationError as e:
        raise ValueError(f"Invalid flow steps: {e}") from e

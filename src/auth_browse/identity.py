"""Synthetic identity and headers used for the authentication bypass."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

# The target application swaps in TEST_USER when it sees these headers.
BYPASS_HEADERS: dict[str, str] = {
    "x-test-auth-bypass": "true",
    "x-testing-mode": "true",
}


@dataclass(frozen=True)
class TestUser:
    """Canned identity echoed in capture metadata. Never a real account."""

    __test__ = False  # not a pytest class

    id: str
    email: str
    first_name: str
    last_name: str
    profile_image_url: str | None = None
    is_admin: bool = False

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


TEST_USER = TestUser(
    id="test-user-id",
    email="test@example.com",
    first_name="Test",
    last_name="User",
)

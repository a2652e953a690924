"""Configuration for the authenticated browser layer.

Loads auth-browse.yaml with browser and target-application settings, then
overlays the deployment identifiers from the environment.

Example auth-browse.yaml:

    environment: production
    repl_slug: my-app
    repl_owner: me
    ws_endpoint: ws://browserless:3000?token=abc
    ready_timeout_ms: 8000
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

CONFIG_FILE_NAME = "auth-browse.yaml"
CONFIG_DIR_NAME = ".auth-browse"

# Environment variables consulted by load_config
ENV_CONFIG_PATH = "AUTH_BROWSE_CONFIG"
ENV_MODE = "APP_ENV"
ENV_REPL_SLUG = "REPL_SLUG"
ENV_REPL_OWNER = "REPL_OWNER"

DEFAULT_USER_INFO_SELECTORS = [
    '[data-testid="user-avatar"]',
    '[data-testid="user-name"]',
    '[data-testid="energy-display"]',
    '[data-testid="aura-level"]',
]


class BrowseConfig(BaseModel):
    """Configuration for the authenticated browser layer."""

    # Target application
    environment: Literal["development", "production"] = Field(
        default="development",
        description="Deployment mode; production derives the origin from repl_slug/repl_owner",
    )
    repl_slug: str = Field(default="", description="Application slug (production origin)")
    repl_owner: str = Field(default="", description="Application owner (production origin)")
    local_base_url: str = Field(
        default="http://localhost:5000",
        description="Origin used outside production",
    )
    base_url: str = Field(
        default="",
        description="Explicit origin; overrides the environment-derived one when set",
    )

    # Readiness and waits
    ready_selector: str = Field(
        default='[data-testid="authenticated-content"]',
        description="Marker whose presence signals authenticated content has rendered",
    )
    ready_timeout_ms: int = Field(
        default=5000, ge=0, description="How long to wait for the readiness marker"
    )
    wait_step_timeout_ms: int = Field(
        default=30000, ge=0, description="Default timeout for flow 'wait' steps with a selector"
    )
    wait_step_delay_ms: int = Field(
        default=1000, ge=0, description="Default delay for flow 'wait' steps without a selector"
    )

    # Browser
    headless: bool = Field(default=True, description="Launch the local browser headless")
    browser_args: list[str] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-setuid-sandbox"],
        description="Additional browser launch arguments",
    )
    ws_endpoint: str = Field(
        default="",
        description="Remote browser pool endpoint (CDP); launches Chromium locally when empty",
    )

    # Scraping
    user_info_selectors: list[str] = Field(
        default_factory=lambda: list(DEFAULT_USER_INFO_SELECTORS),
        description="Candidate selectors for on-page identity/status fields",
    )

    log_level: str = Field(default="INFO", description="Minimum loguru level")

    def resolve_base_url(self) -> str:
        """Resolve the target application's origin (no trailing slash).

        Raises:
            ValueError: In production mode without both identifiers.
        """
        if self.base_url:
            return self.base_url.rstrip("/")
        if self.environment == "production":
            if not self.repl_slug or not self.repl_owner:
                raise ValueError(
                    "production mode requires repl_slug and repl_owner "
                    f"(set {ENV_REPL_SLUG} and {ENV_REPL_OWNER})"
                )
            return f"https://{self.repl_slug}.{self.repl_owner}.repl.co"
        return self.local_base_url.rstrip("/")

    def url_for(self, path: str) -> str:
        """Join a path onto the resolved origin."""
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.resolve_base_url()}{path}"


def _find_config_file() -> Path | None:
    """Locate a config file.

    Resolution order:
    1. AUTH_BROWSE_CONFIG env var
    2. cwd/.auth-browse/auth-browse.yaml
    3. ~/.auth-browse/auth-browse.yaml
    """
    env_config = os.getenv(ENV_CONFIG_PATH)
    if env_config:
        return Path(env_config)

    project_config = Path.cwd() / CONFIG_DIR_NAME / CONFIG_FILE_NAME
    if project_config.exists():
        return project_config

    global_config = Path.home() / CONFIG_DIR_NAME / CONFIG_FILE_NAME
    if global_config.exists():
        return global_config

    return None


def _env_overlay() -> dict[str, Any]:
    """Collect deployment identifiers from the environment."""
    overlay: dict[str, Any] = {}
    mode = os.getenv(ENV_MODE)
    if mode:
        overlay["environment"] = mode
    slug = os.getenv(ENV_REPL_SLUG)
    if slug:
        overlay["repl_slug"] = slug
    owner = os.getenv(ENV_REPL_OWNER)
    if owner:
        overlay["repl_owner"] = owner
    return overlay


def load_config(config_path: Path | str | None = None) -> BrowseConfig:
    """Load configuration from YAML and the environment.

    Args:
        config_path: Path to config file (overrides resolution)

    Returns:
        Validated BrowseConfig

    Raises:
        ValueError: If the file cannot be read or fails validation.
    """
    path = Path(config_path) if config_path is not None else _find_config_file()

    raw_data: dict[str, Any] = {}
    if path is not None and path.exists():
        try:
            with path.open() as f:
                raw_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
        except OSError as e:
            raise ValueError(f"Error reading {path}: {e}") from e
        if not isinstance(raw_data, dict):
            raise ValueError(f"Invalid configuration in {path}: expected a mapping")

    raw_data.update(_env_overlay())

    try:
        return BrowseConfig.model_validate(raw_data)
    except Exception as e:
        source = path if path is not None else "environment"
        raise ValueError(f"Invalid configuration in {source}: {e}") from e


# Global config instance
_config: BrowseConfig | None = None


def get_config(
    config_path: Path | str | None = None, reload: bool = False
) -> BrowseConfig:
    """Get or load the global configuration.

    Args:
        config_path: Path to config file (only used on first load)
        reload: Force reload configuration
    """
    global _config

    if _config is None or reload:
        _config = load_config(config_path)

    return _config

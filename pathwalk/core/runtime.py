"""
Runtime context and configuration for pathwalk.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path

from pathwalk.core import paths
from pathwalk.core.keys import KEY_TYPES, KeyDeserializer
from pathwalk.core.settings import Settings, load_settings, save_settings
from pathwalk.core.walker import PathWalker
from pathwalk.utils.parse import as_bool, as_choice


@dataclass
class Runtime:
    """Configuration for the pathwalk Runtime environment."""
    settings_dir: Path
    settings: Settings
    logger: logging.Logger

    @property
    def key_deserializer(self) -> KeyDeserializer | None:
        """Stock KeyDeserializer selected by `settings.key_type`."""
        key_type = as_choice(self.settings.key_type, set(KEY_TYPES), "str")
        return KEY_TYPES[key_type]

    def walker(self, *paths_: Path | str) -> PathWalker:
        """PathWalker for the given paths, configured from the settings."""
        return PathWalker(
            *paths_,
            suppress_exceptions=self.settings.suppress_exceptions,
            key_deserializer=self.key_deserializer,
        )

    def save_settings(self) -> Path:
        """Persist the current settings to the settings directory."""
        path = save_settings(self.settings_dir, self.settings)
        self.logger.info("Saved settings to %s", path)
        return path


# --- Runtime management ---

def build_runtime(
    *,
    settings_dir: Path | None = None,
    verbose: bool | None = None,
    strict: bool | None = None,
    key_type: str | None = None,
) -> Runtime:
    """
    Builds and returns a Runtime object for pathwalk. Explicit arguments win
    over environment variables, which win over the settings file.
    """
    # 1. Settings
    if settings_dir is not None:
        settings_dir = settings_dir.expanduser().resolve()
    elif env := os.getenv("PATHWALK_SETTINGS_DIR"):
        settings_dir = Path(env).expanduser().resolve()
    else:
        settings_dir = paths.default_settings_dir()
    settings = load_settings(settings_dir)
    if strict is None:
        strict = as_bool(os.getenv("PATHWALK_STRICT") or None)
    if strict is not None:
        settings.suppress_exceptions = not strict
    if verbose is not None:
        settings.verbose = verbose
    if key_type is not None:
        settings.key_type = key_type
    # 2. Logging
    logger = logging.getLogger("pathwalk")
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if settings.verbose else logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    logger.setLevel(logging.DEBUG if settings.verbose else logging.INFO)
    # 3. Create context
    return Runtime(
        settings_dir=settings_dir,
        settings=settings,
        logger=logger,
    )

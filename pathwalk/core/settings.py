"""
User settings for pathwalk, persisted as JSON in the settings directory.
"""
from dataclasses import asdict, dataclass, fields
import json
from pathlib import Path
from typing import Any

from pathwalk.core.keys import KEY_TYPES
from pathwalk.utils.parse import as_bool, as_choice

SETTINGS_FILE = "settings.json"

OUTPUT_FORMATS = frozenset({"json", "yaml"})

_FLAGS = ("suppress_exceptions", "verbose")


@dataclass
class Settings:
    """Configuration settings for pathwalk."""
    suppress_exceptions: bool = True
    verbose: bool = False
    output_format: str = "json"
    key_type: str = "str"  # see pathwalk.core.keys.KEY_TYPES

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Settings':
        """
        Hydrate Settings from a dictionary. Hand-edited values are coerced
        ("no" is False, "YAML" is "yaml"); unusable ones raise ValueError.
        """
        defaults = cls()
        valid_keys = {f.name for f in fields(cls)}
        filtered_data = {k: v for k, v in data.items() if k in valid_keys}
        for name in _FLAGS:
            if name in filtered_data:
                flag = as_bool(filtered_data[name])
                filtered_data[name] = getattr(defaults, name) if flag is None else flag
        if "output_format" in filtered_data:
            filtered_data["output_format"] = as_choice(
                filtered_data["output_format"], OUTPUT_FORMATS, defaults.output_format)
        if "key_type" in filtered_data:
            filtered_data["key_type"] = as_choice(
                filtered_data["key_type"], frozenset(KEY_TYPES), defaults.key_type)
        return cls(**filtered_data)

    def to_dict(self) -> dict[str, Any]:
        """Serialize Settings to a dictionary."""
        return asdict(self)


# --- Persistence functions ---

def load_settings(settings_dir: Path) -> Settings:
    """Load settings from a JSON file in the settings directory."""
    path = settings_dir / SETTINGS_FILE
    if not path.exists():
        return Settings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Settings.from_dict(data)
    except (ValueError, TypeError, AttributeError):
        # Corrupt file or unusable values: default settings (failsafe)
        return Settings()


def save_settings(settings_dir: Path, settings: Settings) -> Path:
    """Save settings to a JSON file in the settings directory."""
    settings_dir.mkdir(parents=True, exist_ok=True)
    path = settings_dir / SETTINGS_FILE
    data = settings.to_dict()
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path

"""
Default locations for pathwalk configuration.
"""
from pathlib import Path
from platformdirs import user_data_dir

APP_NAME = 'pathwalk'


def default_settings_dir() -> Path:
    """Get the default settings directory for pathwalk."""
    return Path(user_data_dir(APP_NAME)).expanduser().resolve()

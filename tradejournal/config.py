"""Configuration loading for the trade journal.

Settings live in ``~/.config/tradejournal/config.toml``. Every value has
a default, so a missing or unreadable file still yields a usable setup.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

import toml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "tradejournal"
CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = CONFIG_DIR / "tradejournal.db"
DEFAULT_USER_ID = "local"

CONFIG_TEMPLATE = """[user]
id = "local"

[database]
path = "~/.config/tradejournal/tradejournal.db"

[openai]
api_key = "your-openai-api-key"
model = "gpt-5.2"

[summarizer]
enabled = true
timeout_seconds = 30
"""


def load_config(config_path: Optional[Path] = None) -> Optional[dict]:
    """Load the TOML config.

    Args:
        config_path: Optional path override.

    Returns:
        Parsed config, or None if the file is missing or unreadable.
    """
    path = config_path or CONFIG_PATH
    if not path.exists():
        return None
    try:
        return toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return None


def write_default_config(config_path: Optional[Path] = None) -> Path:
    """Write the config template if no config exists yet."""
    path = config_path or CONFIG_PATH
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(CONFIG_TEMPLATE)
    return path


def get_user_id(config: Optional[dict]) -> str:
    """Owner identifier for journal entries."""
    return (config or {}).get("user", {}).get("id", DEFAULT_USER_ID)


def get_db_path(config: Optional[dict]) -> Path:
    """Database path from config, falling back to the default location."""
    path = (config or {}).get("database", {}).get("path")
    return Path(path).expanduser() if path else DEFAULT_DB_PATH


def get_openai_key(config: Optional[dict]) -> Optional[str]:
    """OpenAI key from config or the OPENAI_API_KEY environment variable.

    The template placeholder counts as not configured.
    """
    key = (config or {}).get("openai", {}).get("api_key", "")
    if key and key != "your-openai-api-key":
        return key
    return os.environ.get("OPENAI_API_KEY")


def get_openai_model(config: Optional[dict]) -> Optional[str]:
    """Model override from config, if any."""
    return (config or {}).get("openai", {}).get("model")


def summarizer_enabled(config: Optional[dict]) -> bool:
    return bool((config or {}).get("summarizer", {}).get("enabled", True))


def summarizer_timeout(config: Optional[dict]) -> float:
    return float((config or {}).get("summarizer", {}).get("timeout_seconds", 30))


def local_now() -> datetime:
    """Current time as a timezone-aware local datetime."""
    return datetime.now().astimezone()

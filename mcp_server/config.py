# ============================================================================
# CHANGELOG (recent first, max 5 entries)
# 10/18/2026 - Contact sources directory and per-source match cap settings
# 10/18/2026 - Environment overrides for database paths
# ============================================================================
"""
Configuration module for the iMessage archive MCP server.

Handles path resolution, logging setup, and configuration loading.
All paths are resolved relative to PROJECT_ROOT to ensure the server
works correctly regardless of the working directory it's started from.
"""

import copy
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# MCP servers can be started from arbitrary working directories,
# so we always resolve paths relative to this file's parent
PROJECT_ROOT = Path(__file__).parent.parent

LOG_DIR = PROJECT_ROOT / "logs"
CONFIG_PATH = PROJECT_ROOT / "config" / "mcp_server.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    "server_name": "imessage",
    "version": "1.0.0",
    "paths": {
        "messages_db": "~/Library/Messages/chat.db",
        "contacts_sources": "~/Library/Application Support/AddressBook/Sources",
    },
    "contacts": {
        "max_matches_per_source": None,
    },
}

logger = logging.getLogger(__name__)


def setup_logging(level: int = logging.INFO) -> None:
    """
    Log to logs/mcp_server.log and stderr.

    stdout carries the MCP stdio protocol, so the stream handler must
    never write there.
    """
    LOG_DIR.mkdir(exist_ok=True)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(LOG_DIR / 'mcp_server.log'),
            logging.StreamHandler(sys.stderr)
        ]
    )


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load server configuration, layered as defaults < JSON file < environment.

    Environment overrides:
        IMESSAGE_DB_PATH: path to chat.db
        IMESSAGE_CONTACTS_DIR: AddressBook Sources directory

    Args:
        config_path: JSON file to read (default: config/mcp_server.json)

    Returns:
        Merged configuration dict
    """
    config_path = Path(config_path) if config_path else CONFIG_PATH
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path.exists():
        with open(config_path) as f:
            file_config = json.load(f)
        for key, value in file_config.items():
            if isinstance(value, dict) and isinstance(config.get(key), dict):
                config[key].update(value)
            else:
                config[key] = value
    else:
        logger.warning(f"Config not found at {config_path}, using defaults")

    if os.getenv("IMESSAGE_DB_PATH"):
        config["paths"]["messages_db"] = os.environ["IMESSAGE_DB_PATH"]
    if os.getenv("IMESSAGE_CONTACTS_DIR"):
        config["paths"]["contacts_sources"] = os.environ["IMESSAGE_CONTACTS_DIR"]

    return config


def resolve_path(path_str: str) -> str:
    """
    Resolve a config path relative to PROJECT_ROOT or expand ~.

    Args:
        path_str: Path string from configuration

    Returns:
        Resolved absolute path as string
    """
    path = Path(path_str)
    if path_str.startswith("~"):
        return str(path.expanduser())
    elif path.is_absolute():
        return str(path)
    else:
        return str(PROJECT_ROOT / path)

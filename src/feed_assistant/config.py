from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional

# --- Configuration ---
DEFAULT_FEED_URLS: Dict[str, str] = {
    "blog": "https://fernandobelotto.com/api/rss/blog/pt-BR",
    "news": "https://fernandobelotto.com/api/rss/news/pt-BR",
}

CACHE_TTL = 30 * 60
HTTP_TIMEOUT = 15
RETRY_ATTEMPTS = 4
INITIAL_RETRY_DELAY = 0.5

REQUEST_HEADERS = {
    "User-Agent": "feed-assistant/1.0",
    "Accept": "application/rss+xml, application/atom+xml, application/xml;q=0.9, */*;q=0.8",
}

# Streaming filter buffer bounds, in characters.
STREAM_BUFFER_LIMIT = 10_000
STREAM_BUFFER_KEEP = 1_000

MAX_RESPONSE_CHARS = 2000
MIDDLEWARE_MAX_CHARS = 2500

CONFIG_PATH = os.path.expanduser("~/.config/feed-assistant/config.json")

# --- Logging ---
logger = logging.getLogger("feed_assistant")


def setup_logging(debug: bool = False) -> Optional[str]:
    """Configure logging."""
    if not debug:
        logging.basicConfig(level=logging.CRITICAL, handlers=[logging.NullHandler()])
        return None

    ts = datetime.now().strftime("%Y%m%dT%H%M%S")
    pid = os.getpid()
    debug_path = f"/tmp/feed_assistant_debug_{ts}_{pid}.log"

    logging.basicConfig(
        level=logging.DEBUG,
        filename=debug_path,
        filemode="a",
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    logger.debug("Debug logging enabled to %s", debug_path)
    return debug_path


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the main configuration file, returning an empty dict if absent."""
    config_path = path or CONFIG_PATH
    if not os.path.exists(config_path):
        logger.debug("No config file at %s, using defaults.", config_path)
        return {}
    try:
        with open(config_path, "r") as f:
            config = json.load(f)
            logger.info("Loaded config from %s", config_path)
            return config if isinstance(config, dict) else {}
    except (IOError, json.JSONDecodeError) as e:
        logger.error("Failed to load config from %s: %s", config_path, e)
        return {}


def feed_registry(config: Dict[str, Any]) -> Dict[str, str]:
    """Section name -> feed URL, user entries overriding the defaults."""
    registry = dict(DEFAULT_FEED_URLS)
    for section, url in (config.get("feeds") or {}).items():
        if url:
            registry[section.lower()] = url
        else:
            registry.pop(section.lower(), None)
    return registry


def cache_ttl(config: Dict[str, Any]) -> float:
    try:
        return float(config.get("cache_ttl", CACHE_TTL))
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid cache_ttl %r", config.get("cache_ttl"))
        return float(CACHE_TTL)

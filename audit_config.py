import os
import logging
from dataclasses import dataclass
from functools import lru_cache
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36'
PAGESPEED_STRATEGIES = ('mobile', 'desktop')

_TRUE_VALUES = ('1', 'true', 'yes', 'on')
_FALSE_VALUES = ('0', 'false', 'no', 'off', '')


@dataclass(frozen=True)
class AuditSettings:
    """Runtime settings for the audit collaborators"""
    pagespeed_api_key: str = ""
    pagespeed_strategy: str = "mobile"
    pagespeed_timeout: float = 30.0
    pagespeed_max_attempts: int = 2
    scrape_timeout: float = 15.0
    user_agent: str = DEFAULT_USER_AGENT
    parse_schema_types: bool = False


def _get_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _get_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {raw!r}")
    return value


def _get_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def load_settings() -> AuditSettings:
    """Read settings from the environment (and .env file).

    Raises:
        ValueError: if a variable is set to a value that cannot be used.
    """
    strategy = os.environ.get("PAGESPEED_STRATEGY", "mobile").strip().lower() or "mobile"
    if strategy not in PAGESPEED_STRATEGIES:
        raise ValueError(f"PAGESPEED_STRATEGY must be one of {', '.join(PAGESPEED_STRATEGIES)}, got {strategy!r}")

    api_key = os.environ.get("PAGESPEED_API_KEY", "").strip()
    if not api_key:
        logger.info("PAGESPEED_API_KEY is not set, PageSpeed requests will be unauthenticated")

    return AuditSettings(
        pagespeed_api_key=api_key,
        pagespeed_strategy=strategy,
        pagespeed_timeout=_get_float("PAGESPEED_TIMEOUT", 30.0),
        pagespeed_max_attempts=_get_int("PAGESPEED_MAX_ATTEMPTS", 2),
        scrape_timeout=_get_float("SCRAPE_TIMEOUT", 15.0),
        user_agent=os.environ.get("SCRAPE_USER_AGENT", "").strip() or DEFAULT_USER_AGENT,
        parse_schema_types=_get_bool("SEO_PARSE_SCHEMA_TYPES", False),
    )


@lru_cache()
def get_settings() -> AuditSettings:
    """Cached settings instance, so the environment is only read once"""
    return load_settings()

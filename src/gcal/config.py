"""
Module level defaults shared by the descriptors and the default transport.
Call configure() once at startup, before any clients are built.
"""
from typing import Any

DEFAULT_BASE_URL = "https://www.googleapis.com/calendar/v3"
DEFAULT_TIMEOUT = 15.0
DEFAULT_USER_AGENT = "gcal-python"

_DEFAULTS = {
    'base_url': DEFAULT_BASE_URL,
    'timeout': DEFAULT_TIMEOUT,
    'user_agent': DEFAULT_USER_AGENT,
}

_settings = dict(_DEFAULTS)


def configure(base_url: str|None = None,
              timeout: float|None = None,
              user_agent: str|None = None) -> None:
    """
    Set module defaults.  Only the values given are changed.

    Example:
        >>> import gcal
        >>> gcal.configure(base_url='http://localhost:8080/calendar/v3', timeout=5)
    """
    if base_url is not None:
        _settings['base_url'] = str(base_url).rstrip('/')
    if timeout is not None:
        _settings['timeout'] = float(timeout)
    if user_agent is not None:
        _settings['user_agent'] = str(user_agent)


def get_settings() -> dict[str, Any]:
    """Get current module settings."""
    return _settings


def reset() -> None:
    """Restore every setting to its default."""
    _settings.clear()
    _settings.update(_DEFAULTS)

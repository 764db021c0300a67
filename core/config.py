# =============================================================================
# core/config.py  —  Process configuration (resolved ONCE at startup)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Builds the immutable ApolloConfig that every outbound request uses.
#   There is no module-level client or key: main.py calls load_config()
#   once and hands the result to ApolloClient, which keeps a reference.
#
# RESOLUTION ORDER for the API key:
#   1. --api-key on the command line
#   2. APOLLO_IO_API_KEY in the environment
#   3. APOLLO_IO_API_KEY in a .env file (loaded via python-dotenv; it never
#      overrides variables that are already set)
#
#   No key → ConfigurationError.  The server refuses to start rather than
#   failing on every single tool call later.
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from core.exceptions import ConfigurationError

API_KEY_ENV = "APOLLO_IO_API_KEY"
TIMEOUT_ENV = "APOLLO_IO_TIMEOUT"

DEFAULT_BASE_URL = "https://api.apollo.io/api/v1"
# Unversioned host still used by the company/people lookups behind
# employees_of_company.
DEFAULT_LEGACY_BASE_URL = "https://api.apollo.io/v1"
# The web-app host; the only place the "add to my prospects" call lives.
DEFAULT_APP_BASE_URL = "https://app.apollo.io/api/v1"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class ApolloConfig:
    """Credentials and endpoints shared by every request in the process."""

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    legacy_base_url: str = DEFAULT_LEGACY_BASE_URL
    app_base_url: str = DEFAULT_APP_BASE_URL
    timeout: float = DEFAULT_TIMEOUT

    def __repr__(self) -> str:
        # Keep the key out of logs and tracebacks.
        return (
            f"ApolloConfig(api_key='***', base_url={self.base_url!r}, "
            f"timeout={self.timeout!r})"
        )


def load_config(
    api_key: Optional[str] = None,
    timeout: Optional[float] = None,
    environ: Optional[Mapping[str, str]] = None,
    use_dotenv: bool = True,
) -> ApolloConfig:
    """Resolve the process configuration.

    Args:
        api_key: Value of the --api-key flag, if given.  Wins over the env.
        timeout: Value of the --timeout flag, if given.
        environ: Environment to read from (defaults to os.environ).
        use_dotenv: Load a .env file into os.environ first.

    Raises:
        ConfigurationError: if no API key can be found, or the timeout
            setting is not a positive number.
    """
    if use_dotenv:
        load_dotenv(find_dotenv(usecwd=True))
    env = os.environ if environ is None else environ

    key = (api_key or env.get(API_KEY_ENV) or "").strip()
    if not key:
        raise ConfigurationError(
            f"{API_KEY_ENV} environment variable or --api-key flag is required"
        )

    if timeout is None:
        raw = env.get(TIMEOUT_ENV)
        try:
            timeout = float(raw) if raw else DEFAULT_TIMEOUT
        except ValueError:
            raise ConfigurationError(f"{TIMEOUT_ENV} must be a number, got {raw!r}")
    if timeout <= 0:
        raise ConfigurationError(f"Timeout must be positive, got {timeout}")

    return ApolloConfig(api_key=key, timeout=timeout)

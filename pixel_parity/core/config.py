"""Settings for pixel-parity, read from the environment and .env files.

Only keys starting with PIXEL_PARITY_ are read. Lookup order (first wins):
  1. The OS environment.
  2. The .env file given with --env-file, or else the first .env found
     walking up from the cwd. The walk stops at a directory holding .git
     (a dir in a clone, a file in a worktree).

The .env file never modifies os.environ; its values only feed Settings.

Recognised keys:
  PIXEL_PARITY_LOG_LEVEL      DEBUG, INFO, WARNING, ERROR or CRITICAL (default WARNING)
  PIXEL_PARITY_ALLOWED_DELTA  per-element tolerance (default 3 for bytes, 0 for wider integers)
  PIXEL_PARITY_MAX_DETAILS    how many elements the diff markers cover (default 80)
"""

import os
from dataclasses import dataclass
from pathlib import Path

from pixel_parity.core.errors import ConfigurationError
from pixel_parity.core.logger import LOG_LEVEL_MAP

ENV_PREFIX = 'PIXEL_PARITY_'
LOG_LEVEL_KEY = 'PIXEL_PARITY_LOG_LEVEL'
ALLOWED_DELTA_KEY = 'PIXEL_PARITY_ALLOWED_DELTA'
MAX_DETAILS_KEY = 'PIXEL_PARITY_MAX_DETAILS'


@dataclass(frozen=True)
class Settings:
    log_level: str = 'WARNING'
    # None lets the validator pick: 3 for byte buffers, 0 for wider integers
    allowed_int_delta: int | None = None
    max_details: int = 80
    env_path: Path | None = None


def _find_dotenv(start: Path) -> Path | None:
    """First .env between start and the enclosing repository root, if any."""
    start = start.resolve()
    for directory in (start, *start.parents):
        if (directory / '.env').is_file():
            return directory / '.env'
        if (directory / '.git').exists():
            return None
    return None


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in '"\'':
        return value[1:-1]
    return value


def _parse_dotenv(path: Path) -> dict[str, str]:
    """PIXEL_PARITY_* assignments from a .env file. Accepts KEY=value, KEY="value" and export KEY=value."""
    result: dict[str, str] = {}
    for line in path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        key, sep, raw_value = line.removeprefix('export ').partition('=')
        key = key.strip()
        if sep and key.startswith(ENV_PREFIX):
            result[key] = _unquote(raw_value.strip())
    return result


def read_environment(env_file: str | None = None) -> tuple[dict[str, str], Path | None]:
    """PIXEL_PARITY_* values from the .env file overlaid with the OS environment.

    Returns the values and the .env path they came from (None when none was used).
    """
    if env_file:
        path: Path | None = Path(env_file)
        if not path.is_file():
            raise ConfigurationError(f'.env file not found: {env_file}', setting_name='env_file')
    else:
        path = _find_dotenv(Path.cwd())

    values = _parse_dotenv(path) if path else {}
    values.update((k, v) for k, v in os.environ.items() if k.startswith(ENV_PREFIX))
    return values, path


def _non_negative_int(values: dict[str, str], key: str) -> int | None:
    raw = values.get(key, '').strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f'{key} must be an integer, got {raw!r}', setting_name=key) from e
    if value < 0:
        raise ConfigurationError(f'{key} must not be negative, got {value}', setting_name=key)
    return value


def load_settings(env_file: str | None = None) -> Settings:
    """Build Settings from the environment and the applicable .env file."""
    values, env_path = read_environment(env_file)

    log_level = values.get(LOG_LEVEL_KEY, '').strip().upper() or 'WARNING'
    if log_level not in LOG_LEVEL_MAP:
        raise ConfigurationError(
            f'{LOG_LEVEL_KEY} must be one of {", ".join(LOG_LEVEL_MAP)}, got {log_level!r}',
            setting_name=LOG_LEVEL_KEY,
        )

    max_details = _non_negative_int(values, MAX_DETAILS_KEY)
    return Settings(
        log_level=log_level,
        allowed_int_delta=_non_negative_int(values, ALLOWED_DELTA_KEY),
        max_details=80 if max_details is None else max_details,
        env_path=env_path,
    )

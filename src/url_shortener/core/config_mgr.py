import os
from pathlib import Path

from url_shortener.core.exceptions import ConfigError

ENV_CONFIG_PATH = "URLSHORT_CONFIG_PATH"
DEFAULT_CONFIG_BASENAME = "redirects.yaml"


def _find_config_upwards(start: Path, basename: str) -> Path | None:
    current = start
    while True:
        candidate = current / basename
        if candidate.exists():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def _explicit_config_path(path: Path | str | None) -> Path | None:
    if path is not None:
        return Path(path)
    env_path = (os.getenv(ENV_CONFIG_PATH) or "").strip()
    return Path(env_path) if env_path else None


def resolve_config_path(path: Path | str | None = None) -> Path:
    """Resolve config path from explicit arg, env var, or CWD default."""
    explicit = _explicit_config_path(path)
    if explicit is not None:
        return explicit
    cwd = Path.cwd()
    found = _find_config_upwards(cwd, DEFAULT_CONFIG_BASENAME)
    return found or (cwd / DEFAULT_CONFIG_BASENAME)


def read_raw_config(path: Path | str | None = None) -> bytes:
    """
    Return raw redirect document bytes.

    A missing default ``redirects.yaml`` reads as empty; a missing file given
    by argument or env var raises ConfigError.
    """
    resolved = resolve_config_path(path)
    if not resolved.exists():
        if _explicit_config_path(path) is not None:
            raise ConfigError(f"Config file not found: {resolved}")
        return b""
    try:
        return resolved.read_bytes()
    except OSError as exc:
        raise ConfigError(f"Cannot read {resolved}: {exc}") from exc


def parse_redirect_option(value: str) -> tuple[str, str]:
    """Split a ``PATH=URL`` command line pair."""
    path, sep, url = value.partition("=")
    if not sep:
        raise ConfigError(f"Expected PATH=URL, got {value!r}")
    return path.strip(), url.strip()

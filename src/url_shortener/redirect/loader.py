import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping

import yaml
from pydantic import ValidationError
from starlette.types import ASGIApp

from ..core.config_mgr import read_raw_config, resolve_config_path
from ..core.exceptions import ConfigParseError
from ..core.models import RedirectDocument, RedirectRecord
from .handler import MapHandler, map_handler

logger = logging.getLogger(__name__)

_KEPT_TAGS = {"tag:yaml.org,2002:null", "tag:yaml.org,2002:merge"}


class RedirectLoader(yaml.SafeLoader):
    """SafeLoader keeping scalars as written (``010``, ``yes``, dates); only null and merge keys resolve."""


RedirectLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag in _KEPT_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def parse_yaml(document: bytes | str) -> list[RedirectRecord]:
    """
    Decode a YAML list of ``{path, url}`` mappings.

    An empty or ``null`` document yields no records. Anything that is not a
    list of mappings with scalar values raises ConfigParseError.
    """
    try:
        data = yaml.load(document, Loader=RedirectLoader)
    except yaml.YAMLError as exc:
        raise ConfigParseError(f"Invalid YAML: {exc}") from exc

    if data is None:
        return []

    try:
        return RedirectDocument.model_validate(data).root
    except ValidationError as exc:
        raise ConfigParseError(str(exc)) from exc


def build_map(records: Iterable[RedirectRecord]) -> Mapping[str, str]:
    """Fold records into a read-only table; later paths overwrite earlier ones."""
    table: dict[str, str] = {}
    for record in records:
        if not record.path.startswith("/"):
            logger.warning("Redirect path has no leading slash", extra={"path": record.path})
        table[record.path] = record.url
    return MappingProxyType(table)


def yaml_handler(document: bytes | str, fallback: ASGIApp) -> MapHandler:
    """Parse ``document`` and build a redirecting ASGI app over ``fallback``."""
    records = parse_yaml(document)
    return map_handler(build_map(records), fallback)


def load_redirects(path: Path | str | None = None) -> Mapping[str, str]:
    """
    Load the redirect table from a YAML file.

    A missing ``redirects.yaml`` found by the default lookup gives an empty
    table; a missing file named explicitly raises ConfigError.
    """
    resolved = resolve_config_path(path)
    try:
        records = parse_yaml(read_raw_config(path))
    except ConfigParseError as exc:
        raise ConfigParseError(f"{resolved}: {exc}") from exc

    table = build_map(records)
    logger.info(
        "Redirect table loaded",
        extra={"config_path": str(resolved), "entries": len(table)},
    )
    return table

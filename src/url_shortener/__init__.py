from url_shortener.core.exceptions import ConfigError, ConfigParseError
from url_shortener.redirect.handler import MapHandler, map_handler
from url_shortener.redirect.loader import build_map, load_redirects, parse_yaml, yaml_handler

__all__ = [
    "ConfigError",
    "ConfigParseError",
    "MapHandler",
    "build_map",
    "load_redirects",
    "map_handler",
    "parse_yaml",
    "yaml_handler",
]

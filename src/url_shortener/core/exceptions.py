class ConfigError(Exception):
    """Raised when the redirect configuration is missing or unusable."""


class ConfigParseError(ConfigError):
    """Raised when a redirect document cannot be decoded into path/url records."""

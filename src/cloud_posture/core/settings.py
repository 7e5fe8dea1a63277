"""
Scan settings and check-specific tunables
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .config import DEFAULT_MAX_CONCURRENCY, ENV_PREFIX
from .errors import SettingsError


_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("", "0", "false", "no", "off")


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise SettingsError(f"{name} must be a boolean, got {value!r}")


def _parse_regions(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(',')
    return [str(region).strip() for region in value if str(region).strip()]


@dataclass
class Settings:
    """Options recognized by the scanning core.

    ``regions`` is an allow-list (empty means every region in the catalog),
    ``govcloud`` selects the government catalog, ``region`` overrides the
    default region used by global-service checks. Anything check-specific
    lives in ``tunables``.
    """
    regions: List[str] = field(default_factory=list)
    govcloud: bool = False
    region: Optional[str] = None
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    tunables: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.regions = _parse_regions(self.regions)
        self.govcloud = _parse_bool("govcloud", self.govcloud)
        try:
            self.max_concurrency = int(self.max_concurrency)
        except (TypeError, ValueError):
            raise SettingsError(f"max_concurrency must be an integer, got {self.max_concurrency!r}")
        if self.max_concurrency < 1:
            raise SettingsError(f"max_concurrency must be at least 1, got {self.max_concurrency}")

    def get(self, name: str, default: Any = None) -> Any:
        """Get a check-specific tunable"""
        return self.tunables.get(name, default)

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> "Settings":
        """Build settings from a loose mapping; unknown keys become tunables"""
        if not mapping:
            return cls()

        options = dict(mapping)
        tunables = dict(options.pop('tunables', None) or {})
        known = {}
        for name in ('regions', 'govcloud', 'region', 'max_concurrency'):
            if name in options:
                known[name] = options.pop(name)
        tunables.update(options)
        return cls(tunables=tunables, **known)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from CLOUD_POSTURE_* environment variables"""
        if environ is None:
            environ = os.environ

        options: Dict[str, Any] = {}
        for name in ('regions', 'govcloud', 'region', 'max_concurrency'):
            value = environ.get(ENV_PREFIX + name.upper())
            if value is not None:
                options[name] = value
        return cls.from_mapping(options)

    @classmethod
    def coerce(cls, settings: Any) -> "Settings":
        if settings is None:
            return cls()
        if isinstance(settings, cls):
            return settings
        if isinstance(settings, Mapping):
            return cls.from_mapping(settings)
        raise SettingsError(f"Unsupported settings type: {type(settings).__name__}")


@dataclass(frozen=True)
class Tunable:
    """A check-specific option with a default and an optional validation regex"""
    name: str
    description: str
    default: str
    regex: Optional[str] = None

    def resolve(self, settings: Settings) -> str:
        value = settings.get(self.name)
        if value is None or str(value).strip() == "":
            return self.default

        value = str(value)
        if self.regex and not re.match(self.regex, value, re.IGNORECASE):
            logging.warning(f"Ignoring invalid value {value!r} for setting {self.name}, "
                            f"using default {self.default!r}")
            return self.default
        return value

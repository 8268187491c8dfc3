"""Parsing of ``name=value,name=value`` configuration strings."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field

NAME_SIZE = 32
VALUE_SIZE = 64

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


class ConfigError(ValueError):
    """Raised when a configuration string cannot be parsed."""


def _leading_int(text: str) -> int:
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def _leading_float(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    if not match:
        return 0.0
    token = match.group(1)
    lowered = token.lower().lstrip("+-")
    if lowered.startswith("inf"):
        return -math.inf if token.startswith("-") else math.inf
    if lowered == "nan":
        return math.nan
    return float(token)


@dataclass(frozen=True)
class Config:
    """An ordered list of configuration tags; the first tag of a name wins."""

    tags: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    @classmethod
    def parse(cls, text: str | None) -> "Config":
        """Parse ``text``; parsing stops at the first item without ``=``."""
        tags: list[tuple[str, str]] = []
        rest = text or ""
        while rest:
            eq = rest.find("=")
            if eq < 0:
                break
            name = rest[:eq]
            if len(name) > NAME_SIZE - 1:
                raise ConfigError(f"config name too long: {rest}")
            after = rest[eq:]
            comma = after.find(",")
            end = comma if comma >= 0 else len(after)
            if end > VALUE_SIZE - 1:
                raise ConfigError(f"config value too long: {after}")
            tags.append((name, after[1:end]))
            rest = after[end + 1:] if comma >= 0 else ""
        return cls(tuple(tags))

    def get_str(self, name: str, default: str | None = None) -> str | None:
        """Return the value of ``name`` or ``default`` when it is absent."""
        for tag_name, value in self.tags:
            if tag_name == name:
                return value
        return default

    def get_int(self, name: str, default: int | None = None) -> int | None:
        """Return the leading integer of the value of ``name``."""
        value = self.get_str(name)
        return default if value is None else _leading_int(value)

    def get_float(self, name: str, default: float | None = None) -> float | None:
        """Return the leading floating point number of the value of ``name``."""
        value = self.get_str(name)
        return default if value is None else _leading_float(value)

    def __contains__(self, name: object) -> bool:
        return any(tag_name == name for tag_name, _ in self.tags)

    def __len__(self) -> int:
        return len(self.tags)


def parse_config(text: str | None) -> Config:
    """Parse a configuration string into a :class:`Config`."""
    return Config.parse(text)
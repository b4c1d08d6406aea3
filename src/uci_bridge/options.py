"""
UCI option descriptors.

OptionDescriptor is a passive value mirroring an ``option name ... type ...``
declaration. The session never builds these itself; callers that parse
option lines own them. Converters to and from python-chess are provided so
descriptors can be handed to python-chess tooling.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import chess.engine


class OptionType(Enum):
    """Kind of value an engine option accepts."""

    CHECK = "check"  # boolean
    SPIN = "spin"  # integer in [min, max]
    COMBO = "combo"  # one of a list of strings
    BUTTON = "button"  # command without a value
    STRING = "string"  # free text
    UNKNOWN = "unknown"

    @classmethod
    def from_token(cls, token: str) -> OptionType:
        """Map a UCI type token (e.g. "spin") to an OptionType."""
        try:
            return cls(token.strip().lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class OptionDescriptor:
    """A UCI option that can be set."""

    name: str = ""
    type: OptionType = OptionType.UNKNOWN
    default_value: str = ""
    min_value: str = ""
    max_value: str = ""
    var: str = ""  # a predefined value for a combo option


def _to_int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


def to_chess_option(descriptor: OptionDescriptor) -> chess.engine.Option:
    """Build the python-chess equivalent of ``descriptor``."""
    default: str | int | bool | None = descriptor.default_value or None
    if descriptor.type == OptionType.SPIN and descriptor.default_value:
        default = _to_int(descriptor.default_value)
    elif descriptor.type == OptionType.CHECK and descriptor.default_value:
        default = descriptor.default_value.lower() == "true"

    return chess.engine.Option(
        name=descriptor.name,
        type=descriptor.type.value,
        default=default,
        min=_to_int(descriptor.min_value) if descriptor.min_value else None,
        max=_to_int(descriptor.max_value) if descriptor.max_value else None,
        var=[descriptor.var] if descriptor.var else [],
    )


def from_chess_option(option: chess.engine.Option) -> OptionDescriptor:
    """Convert a python-chess option.

    Only the first predefined value of a combo option is kept.
    """
    default = option.default
    if isinstance(default, bool):
        default_value = "true" if default else "false"
    else:
        default_value = "" if default is None else str(default)

    return OptionDescriptor(
        name=option.name,
        type=OptionType.from_token(option.type),
        default_value=default_value,
        min_value="" if option.min is None else str(option.min),
        max_value="" if option.max is None else str(option.max),
        var=option.var[0] if option.var else "",
    )

"""Splitting node filters off flag values and key/value helpers."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class FilterError(ValueError):
    """Raised when a flag value carries a malformed node filter."""


def split_filters_from_flag(flag: str) -> tuple[str, list[str]]:
    """Separate a flag's value from its node filters.

    The filter part follows an unescaped ``@``; several filters are separated
    by ``;``. A literal ``@`` is written as ``\\@``. Without any ``@`` the
    value is returned unchanged with an empty filter list.
    """
    if "@" not in flag:
        return flag, []

    pieces = flag.split("@")
    last = len(pieces) - 1
    merged: list[str] = []
    buffer = ""

    for position, piece in enumerate(pieces):
        if piece.endswith("\\") and position != last:
            if piece.endswith("\\\\"):
                piece = piece[:-1]
                logger.warning(
                    "The part '%s' of the flag input '%s' ends with a double backslash, "
                    "so we assume you want to escape the backslash before the '@'. "
                    "That's the only time we do this.",
                    piece,
                    flag,
                )
            else:
                logger.debug(
                    "Item '%s' just before an '@' ends with '\\', so we assume it's "
                    "escaping a literal '@'",
                    piece,
                )
                buffer += piece[:-1] + "@"
                continue
        merged.append(buffer + piece)
        buffer = ""

    if len(merged) > 2:
        raise FilterError(
            f"Invalid flag '{flag}': only one unescaped '@' allowed for node filter(s) "
            "(Escape literal '@' with '\\')"
        )
    if len(merged) < 2:
        raise FilterError(
            f"Invalid flag '{flag}' includes unescaped '@' but is missing a node filter "
            "(Escape literal '@' with '\\')"
        )

    value, filters = merged
    return value, filters.split(";")


def split_kv(kvstring: str) -> tuple[str, str]:
    """Split ``KEY=VALUE`` on the first ``=``; a bare key gets an empty value."""
    key, sep, value = kvstring.partition("=")
    if sep:
        return key, value
    return kvstring, ""
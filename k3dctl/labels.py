"""Validation of container runtime labels."""

from __future__ import annotations

_RESERVED_PREFIXES = ("k3s.", "k3d.")
_RESERVED_KEYS = frozenset({"app"})


class ReservedLabelError(ValueError):
    """Raised when a runtime label key is reserved for internal use."""


def validate_runtime_label_key(label_key: str) -> str:
    """Return ``label_key`` if it is allowed, raise if it is reserved."""
    if label_key.startswith(_RESERVED_PREFIXES) or label_key in _RESERVED_KEYS:
        raise ReservedLabelError(f'runtime label "{label_key}" is reserved for internal usage')
    return label_key
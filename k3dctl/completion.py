"""Shell completion helpers proposing clusters, nodes, registries and roles."""

from __future__ import annotations

from collections.abc import Iterable

NODE_ROLES = ("server", "agent")


def complete_names(candidates: Iterable[str], args: Iterable[str], to_complete: str) -> list[str]:
    """Return candidate names starting with ``to_complete`` that are not already in ``args``."""
    taken = set(args)
    return [
        name
        for name in candidates
        if name not in taken and name.startswith(to_complete)
    ]


def complete_node_roles(to_complete: str) -> list[str]:
    """Return the node roles that start with ``to_complete``."""
    return [role for role in NODE_ROLES if role.startswith(to_complete)]
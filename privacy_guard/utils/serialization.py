"""camelCase aliasing shared by the API-facing Pydantic models."""

from __future__ import annotations

import pydantic


def snake_to_camel(name: str) -> str:
    """Convert ``"blocked_trackers_first"`` to ``"blockedTrackersFirst"``."""
    head, *rest = name.split("_")
    return head + "".join(word.capitalize() for word in rest)


# Models accept either the Python name or the camelCase alias on input
# and emit camelCase when dumped with ``by_alias=True``.
CAMEL_CONFIG = pydantic.ConfigDict(alias_generator=snake_to_camel, populate_by_name=True)

"""Message roles shared by stored items and translated messages."""

import logging
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger("responses-bridge")

RoleCoercionHandler = Callable[[str], None]
"""Called with the raw value whenever an unknown role is coerced to ``user``."""


class Role(str, Enum):
    """Closed set of roles understood by the bridge."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


def parse_role(
    value: Optional[str],
    on_unknown: Optional[RoleCoercionHandler] = None,
) -> Role:
    """Parse a textual role, falling back to ``Role.USER``.

    Unknown values are not rejected so that data written by newer upstreams
    still loads. Each coercion is reported to ``on_unknown``; a missing value
    is not a coercion and defaults silently.

    Args:
        value: The raw role string, or None.
        on_unknown: Optional callback receiving the unrecognised value.

    Returns:
        The parsed role.
    """
    if value is None:
        return Role.USER
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        logger.debug(f"Unknown role '{value}', defaulting to 'user'")
        if on_unknown is not None:
            on_unknown(value)
        return Role.USER

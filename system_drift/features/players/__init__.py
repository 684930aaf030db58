"""Players feature - read-only access to profile display names."""

from .orm_models import (
    ANONYMOUS_DISPLAY_NAME,
    PlayerProfileORM,
    display_name_or_anonymous,
)

__all__ = [
    "ANONYMOUS_DISPLAY_NAME",
    "PlayerProfileORM",
    "display_name_or_anonymous",
]

"""Session facade for daemon/app integration."""

from .session import StreamSession, confirmation_prompt

__all__ = [
    "StreamSession",
    "confirmation_prompt",
]

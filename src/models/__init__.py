# Database Models
from src.models.base import Base, TimestampMixin
from src.models.bot_spam_channel import BotSpamChannel

__all__ = [
    "Base",
    "BotSpamChannel",
    "TimestampMixin",
]

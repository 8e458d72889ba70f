# Makes 'models' a package and simplifies imports

from .base import BaseModel, metadata
from .conversation import Conversation
from .message import Message
from .superstar import Superstar
from .user import User

__all__ = [
    "BaseModel",
    "metadata",
    "User",
    "Superstar",
    "Conversation",
    "Message",
]

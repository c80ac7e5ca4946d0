"""FastAPI routers acting as controllers in the MVC architecture."""

from . import analytics, auth, chat, conversations, goals, mood, music, summaries, users, voice

__all__ = [
    "analytics",
    "auth",
    "chat",
    "conversations",
    "goals",
    "mood",
    "music",
    "summaries",
    "users",
    "voice",
]

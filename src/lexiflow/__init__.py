"""Vocabulary review web client for the remote word service."""

from .app import create_app
from .session import ReviewEngine, ReviewSession

__all__ = ["create_app", "ReviewEngine", "ReviewSession"]

"""Application layer: the publish use-case."""

from .publish import publish_tiny_home_instructions

__all__ = ["publish_tiny_home_instructions"]

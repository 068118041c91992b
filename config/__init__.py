"""Configuration module for the FAQ Chatbot."""

from .settings import Settings

__all__ = ["Settings"]

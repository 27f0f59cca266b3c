"""Vostok: a Gemini protocol browser core."""

from .urls import register_scheme

__version__ = "0.1.0"

register_scheme()

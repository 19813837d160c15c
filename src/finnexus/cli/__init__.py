"""Command line interface for finnexus."""

from .app import app, main

__all__ = ["app", "main"]

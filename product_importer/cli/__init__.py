"""Command line interface for the product importer."""

from .app import main

__all__ = ["main"]

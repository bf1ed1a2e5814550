"""Inkwell — a local-first journal with synchronized-folder reconciliation."""

__version__ = "0.1.0"

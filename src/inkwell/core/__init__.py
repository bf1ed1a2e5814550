"""Core infrastructure: configuration, logging, events, storage, CLI."""

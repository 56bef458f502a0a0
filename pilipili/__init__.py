"""Emby bot infrastructure: configuration, logging, an HTTP provider, Emby endpoints and SQLite helpers."""

__version__ = "0.1.0"
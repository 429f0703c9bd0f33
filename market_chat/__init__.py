"""Messaging core of the campus marketplace client."""

__version__ = "0.1.0"

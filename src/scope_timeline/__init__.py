"""Scope Timeline - delivery timeline and progress engine."""

__version__ = "0.1.0"

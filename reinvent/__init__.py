# reinvent/__init__.py
"""Reverse-Invention Generator: alternate-history invention pathways served over HTTP."""

__version__ = "1.0.0"

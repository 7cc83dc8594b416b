"""Tobacco inventory and sales reporting service."""

__version__ = "0.1.0"

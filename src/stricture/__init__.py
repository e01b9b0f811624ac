"""Pluggable rule checks for C# sources and git history."""

__version__ = "0.1.0"

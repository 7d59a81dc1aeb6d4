"""Idea Board — submit ideas, vote on them, attach notes and files."""

__version__ = "1.0.0"

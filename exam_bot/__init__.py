"""Exam Bot: console client for the AI study-assistant backend."""

__version__ = "0.1.0"

"""Lecture recording, storage and AI study-note generation."""

__version__ = "0.1.0"

"""Gemini-backed study coach: syllabus parsing, study plans, practice sets and assignment tracking."""

__version__ = "0.1.0"

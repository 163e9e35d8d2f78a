"""Shared CLI building blocks."""

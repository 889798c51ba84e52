"""Ordered categories of books, links and notes with optimistic concurrency."""

__version__ = "0.1.0"

"""Batch extraction of emails and social media links from websites."""

__version__ = "0.1.0"

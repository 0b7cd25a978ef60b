"""MedBook appointment scheduling and booking engine."""

__version__ = "0.1.0"

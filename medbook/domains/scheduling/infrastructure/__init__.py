"""Scheduling infrastructure: persistence, repositories and external collaborators."""

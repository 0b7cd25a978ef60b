"""Scheduling persistence adapters."""

"""
Scheduling Application Layer

Use cases, ports and DTOs for appointment scheduling.
"""

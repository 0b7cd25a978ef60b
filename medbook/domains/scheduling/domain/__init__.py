"""
Scheduling Domain Layer

Entities, value objects and pure domain services for appointment scheduling.
"""

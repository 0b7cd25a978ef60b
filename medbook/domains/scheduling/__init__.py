"""
Scheduling domain: doctor schedules, slot availability and the booking lifecycle.
"""

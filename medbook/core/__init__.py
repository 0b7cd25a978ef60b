"""
Core package: DDD building blocks, shared utilities, DI container and app factory.
"""

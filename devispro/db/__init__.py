"""Async database engine, session factory and Redis client."""

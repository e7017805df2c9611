"""Pydantic schemas: line items, calculator results, API payloads, events."""

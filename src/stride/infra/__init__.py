"""Persistence infrastructure (SQLModel)."""

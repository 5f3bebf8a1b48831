"""Persistence infrastructure backed by SQLAlchemy."""

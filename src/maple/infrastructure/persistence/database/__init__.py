"""Database models and engine management."""

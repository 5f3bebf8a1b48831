"""Application layer: orchestration utilities shared by the repository facade."""

"""Domain layer: working instances, persistence primitives and repository contracts."""

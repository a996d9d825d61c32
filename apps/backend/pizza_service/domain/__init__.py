"""Domain layer: entities and repository contracts."""

"""Domain layer - engine models and collaborator contracts."""

"""Domain layer: track identity, entities, ports and exceptions."""

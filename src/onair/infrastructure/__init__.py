"""Infrastructure layer: integrations, persistence, observability, lifecycle."""

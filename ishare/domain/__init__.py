"""Client-side domain model: entities, lifecycle rules and ride arithmetic."""

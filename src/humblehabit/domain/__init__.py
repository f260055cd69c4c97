"""Domain layer: record store contracts."""

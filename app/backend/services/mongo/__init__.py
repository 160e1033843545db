"""MongoDB dump services."""

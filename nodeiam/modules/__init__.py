"""nodeiam modules."""

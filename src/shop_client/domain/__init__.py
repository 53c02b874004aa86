"""Domain models and pure checkout rules."""

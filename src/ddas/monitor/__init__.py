"""Terminal reporting."""

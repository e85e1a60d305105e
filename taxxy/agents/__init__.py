"""Classification agents."""

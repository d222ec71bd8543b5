"""Infrastructure — stats recording."""

"""Discord transport adapter."""

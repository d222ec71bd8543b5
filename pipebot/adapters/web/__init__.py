"""Web adapters — FastAPI status routes."""

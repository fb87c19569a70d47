"""Game services."""

"""JWT Pizza service backend."""

"""Interview availability and booking engine."""

"""Command-line surface for hexstream."""

"""Database persistence for saved orders."""

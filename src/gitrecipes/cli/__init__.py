"""Command-line interface for gitrecipes."""

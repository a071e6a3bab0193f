"""CLI module for regraft."""

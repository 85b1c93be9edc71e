"""Command line interface for hymnal."""

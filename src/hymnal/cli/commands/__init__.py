"""Subcommand groups for the hymnal CLI."""

"""Subcommand groups for hymnal-admin."""

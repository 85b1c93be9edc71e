"""Local storage and data models for Hymnal."""

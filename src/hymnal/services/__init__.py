"""Service layer for hymnal: Firebase clients and catalog logic."""

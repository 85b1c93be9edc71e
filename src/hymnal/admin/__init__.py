"""Administrative CLI for hymnal (hymnal-admin)."""

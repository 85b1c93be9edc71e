"""SQL schema definitions for the local hymnal database.

Holds key-value preferences (font size, theme, session) and the locally
stored favorite song numbers.
"""

# SQL to create the preferences table (JSON-encoded values)
CREATE_PREFERENCES_TABLE = """
CREATE TABLE IF NOT EXISTS preferences (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT (datetime('now'))
);
"""

# SQL to create the favorites table; position keeps insertion order
CREATE_FAVORITES_TABLE = """
CREATE TABLE IF NOT EXISTS favorites (
    song_number TEXT PRIMARY KEY,
    position INTEGER NOT NULL,
    added_at TEXT DEFAULT (datetime('now'))
);
"""

CREATE_INDEXES = [
    """
    CREATE INDEX IF NOT EXISTS idx_favorites_position
    ON favorites(position);
    """,
]

# All schema creation statements in order
ALL_SCHEMA_STATEMENTS = [
    CREATE_PREFERENCES_TABLE,
    CREATE_FAVORITES_TABLE,
    *CREATE_INDEXES,
]

SESSION_KEY = "session"

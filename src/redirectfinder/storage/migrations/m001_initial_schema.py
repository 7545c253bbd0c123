"""Migration 001: Initial schema.

Creates the probe status table, the two reference code tables and the
redirects table.
"""

import sqlite3


def up(conn: sqlite3.Connection) -> None:
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS url_status (
            url TEXT PRIMARY KEY NOT NULL,
            status INTEGER,
            final_url TEXT
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS products (
            code TEXT PRIMARY KEY NOT NULL
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS catalog (
            code TEXT PRIMARY KEY NOT NULL
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS redirects (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            from_url TEXT NOT NULL,
            to_url TEXT NOT NULL,
            percent REAL NOT NULL
        )
    """)

    cursor.execute("""
        CREATE INDEX IF NOT EXISTS idx_url_status_status
        ON url_status(status)
    """)

    cursor.execute("""
        CREATE INDEX IF NOT EXISTS idx_redirects_from
        ON redirects(from_url)
    """)

    cursor.execute("""
        CREATE INDEX IF NOT EXISTS idx_redirects_percent
        ON redirects(percent)
    """)


def down(conn: sqlite3.Connection) -> None:
    cursor = conn.cursor()
    cursor.execute("DROP TABLE IF EXISTS redirects")
    cursor.execute("DROP TABLE IF EXISTS catalog")
    cursor.execute("DROP TABLE IF EXISTS products")
    cursor.execute("DROP TABLE IF EXISTS url_status")

#!/usr/bin/env python3
"""
Create the knowledge base tables in Postgres (Supabase).

Reads DATABASE_URL from the environment (or .env). Safe to re-run: every
statement is IF NOT EXISTS.

Usage:
    python scripts/setup_knowledge_schema.py
"""

import os
import sys

import psycopg2
from dotenv import load_dotenv

load_dotenv()

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS knowledge_items (
    id TEXT PRIMARY KEY,
    type TEXT NOT NULL CHECK (type IN ('conversation', 'transcription', 'page')),
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    summary TEXT,
    source_id TEXT UNIQUE,
    created_at BIGINT NOT NULL,
    updated_at BIGINT NOT NULL,
    fts TSVECTOR GENERATED ALWAYS AS (
        to_tsvector('english',
            coalesce(title, '') || ' ' || coalesce(summary, '') || ' ' || coalesce(content, ''))
    ) STORED
);

CREATE INDEX IF NOT EXISTS knowledge_items_fts_idx ON knowledge_items USING GIN (fts);
CREATE INDEX IF NOT EXISTS knowledge_items_updated_idx ON knowledge_items (updated_at DESC);

CREATE TABLE IF NOT EXISTS embeddings (
    id TEXT PRIMARY KEY,
    item_id TEXT NOT NULL REFERENCES knowledge_items(id) ON DELETE CASCADE,
    chunk_index INTEGER NOT NULL,
    chunk_text TEXT NOT NULL,
    embedding TEXT NOT NULL,
    created_at BIGINT NOT NULL
);

CREATE INDEX IF NOT EXISTS embeddings_item_idx ON embeddings (item_id, chunk_index);

CREATE TABLE IF NOT EXISTS tags (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    color TEXT,
    is_auto BOOLEAN NOT NULL DEFAULT FALSE
);

CREATE TABLE IF NOT EXISTS item_tags (
    item_id TEXT NOT NULL REFERENCES knowledge_items(id) ON DELETE CASCADE,
    tag_id TEXT NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
    PRIMARY KEY (item_id, tag_id)
);

CREATE TABLE IF NOT EXISTS projects (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    color TEXT,
    created_at BIGINT NOT NULL,
    updated_at BIGINT NOT NULL
);

CREATE TABLE IF NOT EXISTS project_items (
    project_id TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
    item_id TEXT NOT NULL REFERENCES knowledge_items(id) ON DELETE CASCADE,
    PRIMARY KEY (project_id, item_id)
);

CREATE TABLE IF NOT EXISTS pages (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    content TEXT NOT NULL DEFAULT '',
    source_item_id TEXT REFERENCES knowledge_items(id) ON DELETE SET NULL,
    created_at BIGINT NOT NULL,
    updated_at BIGINT NOT NULL
);

CREATE TABLE IF NOT EXISTS conversations (
    id TEXT PRIMARY KEY,
    title TEXT,
    messages JSONB NOT NULL DEFAULT '[]'::jsonb,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS transcripts (
    id TEXT PRIMARY KEY,
    source_file TEXT,
    full_text TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
"""

TABLES = [
    "knowledge_items",
    "embeddings",
    "tags",
    "item_tags",
    "projects",
    "project_items",
    "pages",
    "conversations",
    "transcripts",
]


def main():
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("DATABASE_URL must be set")
        sys.exit(1)

    print("Connecting to database...")
    conn = psycopg2.connect(database_url)
    conn.autocommit = True
    cur = conn.cursor()

    print("Creating knowledge schema...")
    cur.execute(SCHEMA_SQL)
    print("✅ Schema applied")

    cur.execute(
        "SELECT table_name FROM information_schema.tables WHERE table_name = ANY(%s) ORDER BY table_name",
        (TABLES,),
    )
    print("\nTables present:")
    for (table_name,) in cur.fetchall():
        print(f"  - {table_name}")

    cur.close()
    conn.close()


if __name__ == "__main__":
    main()

# schemas/coaching_schema.py
"""
Coaching Center Schema
- coaching_centers: one row per coaching business
- coaching_branches: physical branches of a center (fan-out scope for center-wide searches)
- coaching_branch_details: branches joined with their center name (branch search source)
"""
from __future__ import annotations
import logging
from sqlalchemy.engine import Engine
from sqlalchemy import text as sa_text
from core.schema_registry import register

logger = logging.getLogger(__name__)


@register("coaching", order=10)
def install_schema(engine: Engine) -> None:
    """
    Installs coaching center and branch tables.
    """
    with engine.begin() as conn:
        # 1. coaching_centers
        conn.execute(sa_text("""
            CREATE TABLE IF NOT EXISTS coaching_centers (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                slug TEXT UNIQUE,
                description TEXT,
                established_year INTEGER,
                logo_url TEXT,
                category TEXT NOT NULL DEFAULT 'OTHER',
                owner_id TEXT,
                status TEXT NOT NULL DEFAULT 'DRAFT',
                phone TEXT,
                email TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """))

        # 2. coaching_branches
        conn.execute(sa_text("""
            CREATE TABLE IF NOT EXISTS coaching_branches (
                id TEXT PRIMARY KEY,
                coaching_center_id TEXT NOT NULL,
                name TEXT NOT NULL,
                description TEXT,
                manager_id TEXT,
                phone TEXT,
                email TEXT,
                is_main_branch INTEGER NOT NULL DEFAULT 0,
                status TEXT NOT NULL DEFAULT 'ACTIVE',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (coaching_center_id) REFERENCES coaching_centers(id) ON DELETE CASCADE
            )
        """))
        conn.execute(sa_text(
            "CREATE INDEX IF NOT EXISTS idx_coaching_branches_center ON coaching_branches(coaching_center_id, status)"
        ))

        # 3. coaching_branch_details view
        conn.execute(sa_text("""
            CREATE VIEW IF NOT EXISTS coaching_branch_details AS
            SELECT
                b.id,
                b.coaching_center_id,
                b.name,
                b.description,
                b.is_main_branch,
                b.status,
                c.name AS coaching_center_name
            FROM coaching_branches b
            LEFT JOIN coaching_centers c ON c.id = b.coaching_center_id
        """))

    logger.info("✅ Installed coaching_centers / coaching_branches")

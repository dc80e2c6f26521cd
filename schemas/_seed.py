# schemas/_seed.py
from __future__ import annotations

import logging
import os
from sqlalchemy import text as sa_text
from sqlalchemy.engine import Engine
from core.schema_registry import register

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────────────────
# Demo coaching center: two active branches, one inactive, plus an
# otherwise-empty center whose only branch is inactive.
# ──────────────────────────────────────────────────────────────────────────────

CENTERS = [
    # id, name, slug, status
    ("C1", "Bright Minds Academy", "bright-minds-academy", "ACTIVE"),
    ("C2", "Lakeside Tutorials", "lakeside-tutorials", "ACTIVE"),
]

BRANCHES = [
    # id, center, name, description, is_main, status
    ("B1", "C1", "Bright Minds North", "Flagship campus near the metro", 1, "ACTIVE"),
    ("B2", "C1", "Bright Minds South", "Weekend batches and test series", 0, "ACTIVE"),
    ("B3", "C1", "Bright Minds East", "Closed for renovation", 0, "INACTIVE"),
    ("B9", "C2", "Lakeside Old Town", "Moved to new premises", 1, "INACTIVE"),
]

PROFILES = [
    # id, full_name, username, avatar_url
    ("S1", "Maya Sharma", "maya_s", "https://avatars.example.com/maya.png"),
    ("S2", "Mark Thomas", "markt", None),
    ("S3", "Ravi Kumar", "ravik", None),
    ("S4", "Amaan Malik", "amaan", "https://avatars.example.com/amaan.png"),
    ("S5", "Omar Ali", "omar_a", None),
    ("S6", "Priya Das", "priyad", None),
]

CLASSES = [
    # id, branch, class_name, subject, grade, max, current, status, visible
    ("K1", "B1", "Maths Foundation", "Mathematics", "10th", 30, 3, "ACTIVE", 1),
    ("K2", "B1", "Physics Crash Course", "Physics", "12th", 25, 1, "ACTIVE", 1),
    ("K3", "B2", "Advanced Maths", "Mathematics", "12th", 20, 1, "ACTIVE", 1),
    ("K4", "B1", "Olympiad Maths Lab", "Mathematics", "11th", 10, 0, "ACTIVE", 0),
    ("K5", "B3", "Chemistry Basics", "Chemistry", "11th", 30, 1, "ACTIVE", 1),
    ("K6", "B1", "Statistics Primer", "Mathematics", "12th", 15, 0, "INACTIVE", 1),
]

ENROLLMENTS = [
    # id, student, branch, class, status
    ("E1", "S1", "B1", "K1", "ENROLLED"),
    ("E2", "S2", "B1", "K2", "ENROLLED"),
    ("E3", "S3", "B1", "K1", "ENROLLED"),
    ("E4", "S4", "B2", "K3", "ENROLLED"),
    ("E5", "S5", "B3", "K5", "ENROLLED"),
    ("E6", "S6", "B1", "K1", "DROPPED"),
]


def seed_enabled() -> bool:
    return os.getenv("SEED_RUN", "1").lower() not in ("0", "false")


def seed_demo_data(engine: Engine) -> None:
    """Idempotent: INSERT OR IGNORE every demo row."""
    with engine.begin() as conn:
        for cid, name, slug, status in CENTERS:
            conn.execute(sa_text("""
                INSERT OR IGNORE INTO coaching_centers (id, name, slug, status)
                VALUES (:id, :name, :slug, :status)
            """), {"id": cid, "name": name, "slug": slug, "status": status})

        for bid, cid, name, desc, is_main, status in BRANCHES:
            conn.execute(sa_text("""
                INSERT OR IGNORE INTO coaching_branches
                    (id, coaching_center_id, name, description, is_main_branch, status)
                VALUES (:id, :cid, :name, :desc, :main, :status)
            """), {"id": bid, "cid": cid, "name": name, "desc": desc, "main": is_main, "status": status})

        for pid, full_name, username, avatar in PROFILES:
            conn.execute(sa_text("""
                INSERT OR IGNORE INTO profiles (id, full_name, username, avatar_url)
                VALUES (:id, :n, :u, :a)
            """), {"id": pid, "n": full_name, "u": username, "a": avatar})

        for kid, bid, cname, subject, grade, mx, cur, status, visible in CLASSES:
            conn.execute(sa_text("""
                INSERT OR IGNORE INTO branch_classes
                    (id, branch_id, class_name, subject, grade_level,
                     max_students, current_enrollment, status, is_visible)
                VALUES (:id, :bid, :cn, :subj, :grade, :mx, :cur, :status, :vis)
            """), {
                "id": kid, "bid": bid, "cn": cname, "subj": subject, "grade": grade,
                "mx": mx, "cur": cur, "status": status, "vis": visible,
            })

        for eid, sid, bid, kid, status in ENROLLMENTS:
            conn.execute(sa_text("""
                INSERT OR IGNORE INTO class_enrollments
                    (id, student_id, branch_id, class_id, enrollment_status)
                VALUES (:id, :sid, :bid, :kid, :status)
            """), {"id": eid, "sid": sid, "bid": bid, "kid": kid, "status": status})


@register("seed", order=900)
def install_seed(engine: Engine) -> None:
    if not seed_enabled():
        logger.info("Seed: SEED_RUN disabled, skipping demo data")
        return
    seed_demo_data(engine)
    logger.info("✅ Seeded demo coaching data")

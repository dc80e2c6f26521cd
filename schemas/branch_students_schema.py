# schemas/branch_students_schema.py
"""
Branch Student Schema
- profiles: user profiles (name, username, avatar)
- branch_classes: classes offered by a branch
- class_enrollments: student <-> class junction
- student_enrollment_details / branch_class_details: denormalized search views
"""
from __future__ import annotations
import logging
from sqlalchemy.engine import Engine
from sqlalchemy import text as sa_text
from core.schema_registry import register

logger = logging.getLogger(__name__)


@register("branch_students", order=20)
def install_schema(engine: Engine) -> None:
    """
    Installs profiles, classes and enrollments plus the views the selectors search.
    """
    with engine.begin() as conn:
        # 1. profiles
        conn.execute(sa_text("""
            CREATE TABLE IF NOT EXISTS profiles (
                id TEXT PRIMARY KEY,
                full_name TEXT,
                username TEXT UNIQUE,
                email TEXT,
                phone TEXT,
                avatar_url TEXT,
                role TEXT DEFAULT 'S',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """))
        conn.execute(sa_text("CREATE INDEX IF NOT EXISTS idx_profiles_username ON profiles(username)"))

        # 2. branch_classes
        conn.execute(sa_text("""
            CREATE TABLE IF NOT EXISTS branch_classes (
                id TEXT PRIMARY KEY,
                branch_id TEXT NOT NULL,
                class_name TEXT NOT NULL,
                subject TEXT NOT NULL,
                description TEXT,
                grade_level TEXT NOT NULL,
                batch_name TEXT,
                max_students INTEGER DEFAULT 30,
                current_enrollment INTEGER DEFAULT 0,
                teacher_id TEXT,
                status TEXT NOT NULL DEFAULT 'ACTIVE',
                is_visible INTEGER NOT NULL DEFAULT 1,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (branch_id) REFERENCES coaching_branches(id) ON DELETE CASCADE,
                CHECK (max_students > 0),
                CHECK (current_enrollment >= 0 AND current_enrollment <= max_students)
            )
        """))
        conn.execute(sa_text("CREATE INDEX IF NOT EXISTS idx_branch_classes_branch ON branch_classes(branch_id)"))

        # 3. class_enrollments
        conn.execute(sa_text("""
            CREATE TABLE IF NOT EXISTS class_enrollments (
                id TEXT PRIMARY KEY,
                student_id TEXT NOT NULL,
                branch_id TEXT NOT NULL,
                class_id TEXT NOT NULL,
                enrollment_date TEXT DEFAULT CURRENT_DATE,
                enrollment_status TEXT NOT NULL DEFAULT 'ENROLLED',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (student_id) REFERENCES profiles(id) ON DELETE CASCADE,
                FOREIGN KEY (branch_id) REFERENCES coaching_branches(id) ON DELETE CASCADE,
                FOREIGN KEY (class_id) REFERENCES branch_classes(id) ON DELETE CASCADE,
                UNIQUE (student_id, class_id)
            )
        """))
        conn.execute(sa_text("CREATE INDEX IF NOT EXISTS idx_class_enrollments_branch ON class_enrollments(branch_id)"))
        conn.execute(sa_text("CREATE INDEX IF NOT EXISTS idx_class_enrollments_class ON class_enrollments(class_id)"))

        # 4. student_enrollment_details view (student search source)
        conn.execute(sa_text("""
            CREATE VIEW IF NOT EXISTS student_enrollment_details AS
            SELECT
                ce.id AS enrollment_id,
                ce.student_id,
                ce.branch_id,
                ce.class_id,
                ce.enrollment_status,
                p.full_name AS student_name,
                p.username AS student_username,
                cb.name AS branch_name,
                cb.coaching_center_id,
                cc.name AS coaching_center_name,
                bc.class_name,
                bc.subject
            FROM class_enrollments ce
            LEFT JOIN profiles p ON p.id = ce.student_id
            LEFT JOIN coaching_branches cb ON cb.id = ce.branch_id
            LEFT JOIN coaching_centers cc ON cc.id = cb.coaching_center_id
            LEFT JOIN branch_classes bc ON bc.id = ce.class_id
        """))

        # 5. branch_class_details view (class search source)
        conn.execute(sa_text("""
            CREATE VIEW IF NOT EXISTS branch_class_details AS
            SELECT
                bc.id,
                bc.branch_id,
                bc.class_name,
                bc.subject,
                bc.grade_level,
                bc.batch_name,
                bc.max_students,
                bc.current_enrollment,
                bc.status,
                bc.is_visible,
                cb.name AS branch_name,
                cb.coaching_center_id
            FROM branch_classes bc
            LEFT JOIN coaching_branches cb ON cb.id = bc.branch_id
        """))

    logger.info("✅ Installed profiles / branch_classes / class_enrollments")

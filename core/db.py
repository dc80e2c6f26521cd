# core/db.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import List
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from core.schema_registry import auto_discover, run_all

logger = logging.getLogger(__name__)

_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")

def get_engine(db_url: str) -> Engine:
    if db_url in _MEMORY_URLS:
        # one shared connection, otherwise every pool checkout sees an empty database
        return create_engine(
            db_url,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if db_url.startswith("sqlite:///"):
        db_file = db_url.replace("sqlite:///", "")
        Path(db_file).parent.mkdir(parents=True, exist_ok=True)
        # the query backend reads from worker threads
        return create_engine(db_url, future=True, connect_args={"check_same_thread": False})
    return create_engine(db_url, future=True)

def init_db(engine: Engine, seed: bool = True) -> List[str]:
    """Installs every registered schema; returns the installers that failed."""
    # 1) auto-discover schema modules (schemas/*.py)
    auto_discover("schemas")

    # 2) run all registered installers
    failed = run_all(engine, skip=() if seed else ("seed",))
    logger.info("Database initialised at %s", engine.url)
    return failed

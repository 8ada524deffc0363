"""Database module for lawn advisories.

This module provides:
- SQLAlchemy async database connection
- User and lawn plan models
- The plan store the advisory runner reads from
"""

from lawn_advisor.database.connection import (
    close_db,
    create_engine,
    create_session_factory,
    create_tables,
    get_db,
    get_session_factory,
    init_db,
)
from lawn_advisor.database.models import Base, LawnPlan, User
from lawn_advisor.database.store import InMemoryPlanStore, PlanStore, SqlPlanStore

__all__ = [
    # Connection
    "close_db",
    "create_engine",
    "create_session_factory",
    "create_tables",
    "get_db",
    "get_session_factory",
    "init_db",
    # Models
    "Base",
    "LawnPlan",
    "User",
    # Store
    "InMemoryPlanStore",
    "PlanStore",
    "SqlPlanStore",
]

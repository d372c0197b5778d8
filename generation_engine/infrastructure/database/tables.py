"""
Database Table Definitions.

This module defines the SQL schema using SQLModel.
We use the 'DBModel' suffix to distinguish these persistence models
from the Pydantic result models (WorkflowResult, StepResult).
"""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON, Column
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WorkflowResultDBModel(SQLModel, table=True):
    """
    Persistence model for WorkflowResults.
    Maps 1-to-1 with the 'workflow_results' table.
    """

    __tablename__ = "workflow_results"

    workflow_id: str = Field(primary_key=True)
    plan_id: str = Field(index=True)
    status: str

    # Denormalized for billing/analytics queries
    total_cost: float = Field(default=0.0)
    total_time: float = Field(default=0.0)

    # The full WorkflowResult (steps, attempts, assets). JSONB on PostgreSQL.
    result: Dict[str, Any] = Field(
        sa_column=Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)
    )

    created_at: datetime = Field(default_factory=_utcnow)

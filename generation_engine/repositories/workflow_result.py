from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from sqlmodel import Session, select

from ..state.models import WorkflowResult
from ..infrastructure.database.tables import WorkflowResultDBModel
from ..infrastructure.database.connection import engine as default_engine


class WorkflowResultRepository(ABC):
    """
    Defines how WorkflowResults are stored for reporting and billing.
    Results are immutable once stored: saving the same workflow_id twice
    is an error.
    """

    @abstractmethod
    def save(self, result: WorkflowResult) -> None:
        """Stores a result. Raises ValueError if the workflow_id exists."""
        pass

    @abstractmethod
    def get(self, workflow_id: str) -> Optional[WorkflowResult]:
        """Retrieves a result by workflow id."""
        pass

    @abstractmethod
    def list_for_plan(self, plan_id: str) -> List[WorkflowResult]:
        """Every stored execution of a plan, oldest first."""
        pass


class InMemoryWorkflowResultRepository(WorkflowResultRepository):
    """
    Uses an in-memory dictionary for testing/dev purposes.
    """

    def __init__(self):
        self._store: Dict[str, WorkflowResult] = {}

    def save(self, result: WorkflowResult) -> None:
        if result.workflow_id in self._store:
            raise ValueError(f"Workflow result {result.workflow_id} already stored.")
        self._store[result.workflow_id] = result

    def get(self, workflow_id: str) -> Optional[WorkflowResult]:
        return self._store.get(workflow_id)

    def list_for_plan(self, plan_id: str) -> List[WorkflowResult]:
        return [r for r in self._store.values() if r.plan_id == plan_id]


class SQLWorkflowResultRepository(WorkflowResultRepository):
    """
    SQL storage (JSON/JSONB column) for workflow results.
    """

    def __init__(self, db_engine=None):
        self.engine = db_engine or default_engine

    def save(self, result: WorkflowResult) -> None:
        with Session(self.engine) as db:
            if db.get(WorkflowResultDBModel, result.workflow_id) is not None:
                raise ValueError(f"Workflow result {result.workflow_id} already stored.")

            db.add(WorkflowResultDBModel(
                workflow_id=result.workflow_id,
                plan_id=result.plan_id,
                status=result.status.value,
                total_cost=result.total_cost,
                total_time=result.total_time,
                result=result.model_dump(mode="json"),
            ))
            db.commit()

    def get(self, workflow_id: str) -> Optional[WorkflowResult]:
        with Session(self.engine) as db:
            row = db.get(WorkflowResultDBModel, workflow_id)
            if not row:
                return None
            # Deserialize JSON -> Pydantic
            return WorkflowResult.model_validate(row.result)

    def list_for_plan(self, plan_id: str) -> List[WorkflowResult]:
        with Session(self.engine) as db:
            statement = (
                select(WorkflowResultDBModel)
                .where(WorkflowResultDBModel.plan_id == plan_id)
                .order_by(WorkflowResultDBModel.created_at, WorkflowResultDBModel.workflow_id)
            )
            return [WorkflowResult.model_validate(row.result) for row in db.exec(statement)]

from generation_engine.repositories.workflow_result import (
    InMemoryWorkflowResultRepository,
    SQLWorkflowResultRepository,
    WorkflowResultRepository,
)

__all__ = [
    "InMemoryWorkflowResultRepository",
    "SQLWorkflowResultRepository",
    "WorkflowResultRepository",
]

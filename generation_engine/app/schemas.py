"""
API Layer - Request/Response Schemas

Pydantic models for API responses that are not engine records.
"""

from typing import List

from pydantic import BaseModel, ConfigDict


class ModelInfo(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    id: str
    name: str
    provider: str
    type: str
    cost_per_unit: float
    cost_unit: str
    average_time: float
    capabilities: List[str]


class ValidationErrorResponse(BaseModel):
    detail: str
    problems: List[str]


class HealthResponse(BaseModel):
    status: str
    models: int

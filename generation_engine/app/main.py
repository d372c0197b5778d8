from typing import Any, Dict, List

from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from .dependencies import get_generation_service, get_model_catalog
from ..exceptions import PlanValidationError
from ..providers.catalog import ModelCatalog
from ..services.generation import GenerationService
from ..state.models import StepResult, WorkflowResult
from .schemas import HealthResponse, ModelInfo, ValidationErrorResponse

app = FastAPI(title="Generation Execution Engine")


@app.exception_handler(PlanValidationError)
async def plan_validation_error_handler(request: Request, exc: PlanValidationError):
    body = ValidationErrorResponse(detail=str(exc), problems=exc.problems)
    return JSONResponse(
        status_code=422,
        content=body.model_dump(),
    )

# --- Endpoints ---

@app.post("/execute", response_model=WorkflowResult)
async def execute_plan(
    payload: Dict[str, Any] = Body(...),
    service: GenerationService = Depends(get_generation_service),
):
    """
    Executes an ExecutionPlan and returns the WorkflowResult once every step
    has finished. Partial failures are part of the result, not errors.
    """
    return await service.execute_plan(payload)


@app.post("/execute/step", response_model=StepResult)
async def execute_step(
    payload: Dict[str, Any] = Body(...),
    service: GenerationService = Depends(get_generation_service),
):
    """Executes a single standalone step."""
    return await service.execute_step(payload)


@app.get("/workflows/{workflow_id}", response_model=WorkflowResult)
def get_workflow_result(
    workflow_id: str,
    service: GenerationService = Depends(get_generation_service),
):
    result = service.get_result(workflow_id)
    if not result:
        raise HTTPException(status_code=404, detail="Workflow result not found")
    return result


@app.get("/models", response_model=List[ModelInfo])
def list_models(catalog: ModelCatalog = Depends(get_model_catalog)):
    return [
        ModelInfo(
            id=spec.model_id,
            name=spec.name,
            provider=spec.provider,
            type=spec.capability,
            cost_per_unit=spec.cost_per_unit,
            cost_unit=spec.cost_unit,
            average_time=spec.average_time,
            capabilities=list(spec.strengths),
        )
        for spec in catalog.list_models()
    ]


@app.get("/health", response_model=HealthResponse)
def health(catalog: ModelCatalog = Depends(get_model_catalog)):
    return HealthResponse(status="ok", models=len(catalog.list_models()))

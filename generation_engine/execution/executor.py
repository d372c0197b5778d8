"""
Executor - Step Execution Layer

This module defines the StepRunner, which turns one PlanStep into exactly one
StepResult. It owns the fallback cascade: the primary model is tried first,
then each fallback in declared order, stopping at the first success.

Candidates are attempted strictly one at a time. Each fallback is only paid
for when the previous candidate has failed, so the cost of a step is bounded
by the sum of the models actually attempted.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..domain.models import ModelSelection, PlanStep
from ..exceptions import ProviderError, ProviderTimeoutError, UnknownModelError
from ..providers.catalog import ModelCatalog
from ..providers.interface import ProviderResponse
from ..state.models import AttemptRecord, StepResult, StepStatus

DEFAULT_PROVIDER_TIMEOUT = 30.0


class StepRunner:
    def __init__(
        self,
        catalog: ModelCatalog,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        self.catalog = catalog
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    async def run(
        self,
        step: PlanStep,
        reference_assets: Optional[List[str]] = None,
    ) -> StepResult:
        started_at = datetime.now(timezone.utc)
        attempts: List[AttemptRecord] = []
        errors: List[str] = []
        last_model = step.primary_model.model_id

        for position, candidate in enumerate(step.candidates):
            last_model = candidate.model_id
            parameters = self._build_parameters(step, candidate, reference_assets)
            start = time.monotonic()

            try:
                response = await self._invoke(candidate, parameters)
            except ProviderError as e:
                elapsed_ms = (time.monotonic() - start) * 1000.0
                attempts.append(AttemptRecord(
                    model_id=candidate.model_id,
                    succeeded=False,
                    error=e.message,
                    elapsed_ms=elapsed_ms,
                ))
                errors.append(f"{candidate.model_id}: {e.message}")
                self.logger.warning(
                    f"Step '{step.step_id}': model '{candidate.model_id}' failed "
                    f"(attempt {position + 1}/{len(step.candidates)}): {e.message}"
                )
                if not e.retryable:
                    break
                continue

            attempts.append(AttemptRecord(
                model_id=candidate.model_id,
                succeeded=True,
                elapsed_ms=response.time_ms,
            ))
            if position > 0:
                self.logger.info(
                    f"Step '{step.step_id}' recovered with fallback model "
                    f"'{candidate.model_id}' after {position} failure(s)"
                )
            else:
                self.logger.info(f"Step '{step.step_id}' succeeded with '{candidate.model_id}'")

            return StepResult(
                step_id=step.step_id,
                status=StepStatus.SUCCESS,
                model_used=candidate.model_id,
                actual_cost=response.cost,
                actual_time=response.time_ms / 1000.0,
                asset_reference=response.asset_reference,
                asset_urls=response.asset_urls,
                content=response.content,
                attempts=attempts,
                started_at=started_at,
                completed_at=datetime.now(timezone.utc),
            )

        self.logger.error(
            f"Step '{step.step_id}' failed: {len(attempts)} candidate model(s) exhausted"
        )
        return StepResult(
            step_id=step.step_id,
            status=StepStatus.FAILED,
            model_used=last_model,
            actual_time=sum(a.elapsed_ms for a in attempts) / 1000.0,
            error=f"All {len(attempts)} candidate model(s) failed. " + "; ".join(errors),
            attempts=attempts,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
        )

    async def _invoke(
        self,
        candidate: ModelSelection,
        parameters: Dict[str, Any],
    ) -> ProviderResponse:
        """
        One provider call under the per-call timeout. Every failure mode,
        including a timeout or an unexpected adapter exception, surfaces as
        ProviderError so the cascade can move on.
        """
        model_id = candidate.model_id
        try:
            adapter = self.catalog.get_adapter(model_id)
        except UnknownModelError as e:
            raise ProviderError(str(e), model_id=model_id) from e

        try:
            return await asyncio.wait_for(
                adapter.invoke(model_id, parameters, self.timeout),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ProviderTimeoutError(model_id, self.timeout) from e
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"{type(e).__name__}: {e}", model_id=model_id) from e

    @staticmethod
    def _build_parameters(
        step: PlanStep,
        candidate: ModelSelection,
        reference_assets: Optional[List[str]],
    ) -> Dict[str, Any]:
        """Step parameters, overridden by model parameters, plus prompt and references."""
        parameters: Dict[str, Any] = {**step.parameters, **candidate.parameters}
        if step.prompt and "prompt" not in parameters:
            parameters["prompt"] = step.prompt
        if reference_assets:
            parameters["reference_image_urls"] = list(reference_assets)
            parameters.setdefault("image_url", reference_assets[0])
        return parameters

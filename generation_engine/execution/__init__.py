"""
Execution Layer - Plan Coordination, Scheduling and Step Execution

Defines the ExecutionCoordinator (entry point), the DependencyScheduler
(wave ordering) and the StepRunner (fallback cascade).
"""

from generation_engine.execution.executor import StepRunner
from generation_engine.execution.scheduler import DependencyScheduler, build_waves
from generation_engine.execution.validation import parse_plan, parse_step, validate_plan
from generation_engine.execution.engine import ExecutionCoordinator


__all__ = [
    "DependencyScheduler",
    "ExecutionCoordinator",
    "StepRunner",
    "build_waves",
    "parse_plan",
    "parse_step",
    "validate_plan",
]

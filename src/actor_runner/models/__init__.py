"""Model types for platform payloads and runtime results."""

from actor_runner.models.boundary_response import BoundaryResponse
from actor_runner.models.field_descriptor import FieldDescriptor
from actor_runner.models.input_schema import InputSchema
from actor_runner.models.model_spec import ModelSpec
from actor_runner.models.resolved_input import ResolvedInput
from actor_runner.models.run_record import RunRecord
from actor_runner.models.run_result import RunResult
from actor_runner.models.run_status import RunStatus

__all__ = [
    "BoundaryResponse",
    "FieldDescriptor",
    "InputSchema",
    "ModelSpec",
    "ResolvedInput",
    "RunRecord",
    "RunResult",
    "RunStatus",
]

"""Public package exports."""

from actor_runner.boundary import RequestBoundary
from actor_runner.generation import InputGenerator
from actor_runner.orchestrator import RunOrchestrator
from actor_runner.platform_client import PlatformClient
from actor_runner.schema_resolver import SchemaResolver

__all__ = ["InputGenerator", "PlatformClient", "RequestBoundary", "RunOrchestrator", "SchemaResolver"]

"""Input extraction from schemas and shape fixes before submission."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from actor_runner.errors import InvalidInput
from actor_runner.models.input_schema import InputSchema


logger = logging.getLogger(__name__)

BOOLEAN_FIELDS: tuple[str, ...] = (
    "keepUrlFragments",
    "respectRobotsTxtFile",
    "debugLog",
    "ignoreSslErrors",
    "forceResponseEncoding",
    "downloadMedia",
    "downloadCss",
    "closeCookieModals",
    "headless",
    "browserLog",
    "useChrome",
    "ignoreCorsAndCsp",
)

MANAGED_PROXY: dict[str, Any] = {"useApifyProxy": True}


@dataclass(frozen=True)
class ExtractedInput:
    values: dict[str, Any]
    missing_required: list[str] = field(default_factory=list)


def extract_input(schema: InputSchema, supplied: Mapping[str, Any] | None = None) -> ExtractedInput:
    """
    Builds runnable values from a schema: prefill, then default, then the caller's value.
    Fields with none of these are omitted; required ones are reported, not enforced.
    """
    values: dict[str, Any] = {}
    for name, descriptor in schema.properties.items():
        if descriptor.has_prefill:
            values[name] = descriptor.prefill
        elif descriptor.has_default:
            values[name] = descriptor.default
        elif supplied is not None and name in supplied:
            values[name] = supplied[name]

    missing = [name for name in schema.required_fields() if name not in values]
    for name in missing:
        logger.warning("Required field %r has no prefill or default value", name)
    return ExtractedInput(values=values, missing_required=missing)


def coerce_bool_literal(value: Any) -> Any:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return value


def wrap_start_urls(value: Any) -> Any:
    if isinstance(value, list):
        return [{"url": item} if isinstance(item, str) else item for item in value]
    return value


def default_proxy_configuration(value: Any) -> Any:
    if isinstance(value, str):
        return dict(MANAGED_PROXY)
    return value


@dataclass(frozen=True)
class CoercionRule:
    field: str
    transform: Callable[[Any], Any]


DEFAULT_RULES: tuple[CoercionRule, ...] = (
    *(CoercionRule(name, coerce_bool_literal) for name in BOOLEAN_FIELDS),
    CoercionRule("startUrls", wrap_start_urls),
    CoercionRule("proxyConfiguration", default_proxy_configuration),
)


def coerce_input(run_input: Any, rules: tuple[CoercionRule, ...] = DEFAULT_RULES) -> dict[str, Any]:
    if not isinstance(run_input, Mapping):
        raise InvalidInput(f"Input must be a JSON object, got {type(run_input).__name__}.")
    coerced = dict(run_input)
    for rule in rules:
        if rule.field in coerced:
            coerced[rule.field] = rule.transform(coerced[rule.field])
    return coerced

"""Span helpers for store operations.

Every Collection operation runs inside a span named after it. The span
carries the node's id and path, and, for mutations, the outcome. A
FAILED outcome marks the span as an error even though nothing was
raised, since driver errors are returned as values.
"""

import inspect
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

T = TypeVar("T")

_tracer = trace.get_tracer("docsync")

# Span attributes never include document values.
ATTR_COLLECTION_ID = "docsync.collection.id"
ATTR_COLLECTION_PATH = "docsync.collection.path"
ATTR_OUTCOME = "docsync.outcome"


def _node_attributes(target: Any) -> dict[str, str]:
    attrs = {}
    node_id = getattr(target, "id", None)
    path = getattr(target, "path", None)
    if isinstance(node_id, str):
        attrs[ATTR_COLLECTION_ID] = node_id
    if isinstance(path, str):
        attrs[ATTR_COLLECTION_PATH] = path or "/"
    return attrs


def _record_result(span: trace.Span, result: Any) -> None:
    outcome = getattr(result, "outcome", None)
    if outcome is None:
        return
    span.set_attribute(ATTR_OUTCOME, str(getattr(outcome, "value", outcome)))
    if getattr(result, "is_error", False):
        error = getattr(result, "error", None)
        span.set_status(Status(StatusCode.ERROR, str(error) if error else "failed"))


def traced(
    operation_name: str,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Run a coroutine function (usually a Collection method) in a span.

    The first positional argument, when it has `id`/`path` attributes,
    labels the span. A returned MutationResult sets the outcome attribute.

    Args:
        operation_name: Span name, e.g. "collection.fetch".
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"traced() expects a coroutine function, got {func!r}")

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            attrs = _node_attributes(args[0]) if args else {}
            with _tracer.start_as_current_span(
                operation_name, attributes=attrs, record_exception=True
            ) as span:
                result = await func(*args, **kwargs)
                _record_result(span, result)
                return result

        return wrapper

    return decorator


def add_span_attributes(**attributes: str | int | float | bool) -> None:
    """Add attributes to the current span, if one is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        span.set_attributes(attributes)


def add_span_event(name: str, attributes: dict | None = None) -> None:
    """Add an event to the current span, if one is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event(name, attributes=attributes or {})

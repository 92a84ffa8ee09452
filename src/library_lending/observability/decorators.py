"""Decorators for tracing MCP tool handlers."""

import functools
from collections.abc import Callable
from datetime import datetime
from typing import Any

import logfire

from . import is_enabled


def trace_tool(tool_name: str):
    """Wrap an async tool handler in a Logfire span when tracing is on."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            if not is_enabled():
                return await func(*args, **kwargs)

            with logfire.span(f"tool.execution.{tool_name}", tool_name=tool_name) as span:
                start_time = datetime.now()
                _add_attributes(span, "input", kwargs)

                result = await func(*args, **kwargs)

                # Handlers report domain failures in the result instead of raising
                success = not (isinstance(result, dict) and result.get("isError"))
                span.set_attribute("tool.success", success)
                span.set_attribute(
                    "tool.duration_ms", (datetime.now() - start_time).total_seconds() * 1000
                )
                return result

        return wrapper

    return decorator


def _add_attributes(span, prefix: str, data: dict[str, Any]) -> None:
    for key, value in data.items():
        if isinstance(value, str | int | float | bool):
            span.set_attribute(f"{prefix}.{key}", value)

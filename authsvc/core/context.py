"""
Request context using contextvars.

Provides per-request context storage for log correlation:
- Request ID
- Trace ID
- User ID
- Tenant ID

This is logging metadata only. Mutations and queries receive their
tenant and actor through an explicit AuthContext argument.
"""

import contextvars
from typing import Any

# Context variables
request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
trace_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "trace_id", default=None
)
user_id_var: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "user_id", default=None
)
tenant_id_var: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "tenant_id", default=None
)


def set_request_context(
    request_id: str | None = None,
    trace_id: str | None = None,
    user_id: int | None = None,
    tenant_id: int | None = None,
) -> None:
    """Set request context variables."""
    if request_id:
        request_id_var.set(request_id)
    if trace_id:
        trace_id_var.set(trace_id)
    if user_id is not None:
        user_id_var.set(user_id)
    if tenant_id is not None:
        tenant_id_var.set(tenant_id)


def get_request_context() -> dict[str, Any]:
    """Get the populated request context as a dictionary."""
    context = {
        "request_id": request_id_var.get(),
        "trace_id": trace_id_var.get(),
        "user_id": user_id_var.get(),
        "tenant_id": tenant_id_var.get(),
    }
    return {key: value for key, value in context.items() if value is not None}


def clear_request_context() -> None:
    """Clear all context variables."""
    request_id_var.set(None)
    trace_id_var.set(None)
    user_id_var.set(None)
    tenant_id_var.set(None)

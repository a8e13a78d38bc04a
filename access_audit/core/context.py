# access_audit/core/context.py

import contextvars

correlation_id_ctx = contextvars.ContextVar("correlation_id", default=None)
org_id_ctx = contextvars.ContextVar("org_id", default=None)

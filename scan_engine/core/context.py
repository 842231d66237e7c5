# scan_engine/core/context.py

import contextvars

correlation_id_ctx = contextvars.ContextVar("correlation_id", default=None)
operator_id_ctx = contextvars.ContextVar("operator_id", default=None)

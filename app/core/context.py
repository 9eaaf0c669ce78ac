# app/core/context.py

import contextvars

correlation_id_ctx = contextvars.ContextVar("correlation_id", default=None)
device_id_ctx = contextvars.ContextVar("device_id", default=None)

"""Request-scoped context via ContextVar.

``request_var`` holds the request being dispatched. The pipeline sets
it before the middleware chain runs and resets it afterwards; nested
mounted apps see the same request object, rewritten in place.

Accessing it outside a request raises ``LookupError``.
"""

from contextvars import ContextVar

from perch.http.request import Request

request_var: ContextVar[Request] = ContextVar("perch_request")
"""The current request. Set by the dispatch pipeline."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()

"""HTTP middleware: timeout and request ID.

Applied in main app; order matters (first added = outermost).
"""

from tasksync.middleware.request_id import RequestIDMiddleware
from tasksync.middleware.timeout import TimeoutMiddleware

__all__ = [
    "RequestIDMiddleware",
    "TimeoutMiddleware",
]

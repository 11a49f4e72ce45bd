from .context import Context, make_context
from .lifecycle import bind_lifecycle

__all__ = ["Context", "make_context", "bind_lifecycle"]

"""Call user handlers whether they are plain functions or coroutines.

The traversal never cares which one it got: a handler's return value
is awaited when it is awaitable and passed through otherwise. That
includes the task returned by ``next()``, so a sync handler written as
``lambda request, response, next: next()`` waits for its downstream
step just like an ``async def`` that awaits it.
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *handler* with the given arguments, awaiting the result if needed."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        return await result
    return result

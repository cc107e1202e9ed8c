"""The ``cacheable`` decorator: runtime wrapping around any function."""

from __future__ import annotations

import functools
import inspect
from typing import Any, Callable, Optional, Sequence, TypeVar, Union

from .coordinator import InterceptionCoordinator, InvocationContext
from .key_builder import KeyBuilder
from .policy import KeyPolicy
from .service import CacheService

F = TypeVar("F", bound=Callable[..., Any])

RECEIVER_NAMES = ("self", "cls")
_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def _has_receiver(signature: inspect.Signature) -> bool:
    params = list(signature.parameters.values())
    return bool(params) and params[0].name in RECEIVER_NAMES and params[0].kind in _POSITIONAL


def cacheable(
    service: CacheService,
    group_name: str = "",
    policy: KeyPolicy = KeyPolicy.USE_ALL_PARAMETERS,
    properties: Union[str, Sequence[str], None] = None,
    method: Optional[bool] = None,
) -> Callable[[F], F]:
    """
    Cache a function's results in ``service``.

    Args:
        service: Cache service that owns the store and TTL settings
        group_name: Namespace prepended to every key of this function
        policy: How arguments feed the key, or IGNORE_TTL
        properties: Property name(s) read under USE_PROPERTIES
        method: True when the first parameter is the receiver, False when it
            is an ordinary argument. None infers it from the parameter name.

    The receiver is left out of the key. With ``method=None`` a first
    parameter named ``self`` or ``cls`` is taken as the receiver, so a free
    function with such a parameter needs ``method=False`` to key on it.
    """

    def decorator(func: F) -> F:
        signature = inspect.signature(func)
        has_receiver = _has_receiver(signature) if method is None else method
        if has_receiver and not signature.parameters:
            raise TypeError(f"{func.__qualname__} has no parameter to bind the receiver to")
        key_builder = KeyBuilder.for_function(
            func,
            group_name=group_name,
            policy=policy,
            properties=properties,
            max_key_length=service.max_key_length,
            skip_receiver=has_receiver,
        )
        coordinator = InterceptionCoordinator(key_builder, service)

        def _context(args: tuple, kwargs: dict) -> InvocationContext:
            bound = signature.bind(*args, **kwargs)
            bound.apply_defaults()
            values = list(bound.arguments.values())
            instance = values.pop(0) if has_receiver else None
            return InvocationContext(arguments=values, instance=instance)

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def wrapper(*args: Any, **kwargs: Any) -> Any:
                context = _context(args, kwargs)
                coordinator.on_entry(context)
                if context.skip_body:
                    return context.return_value
                context.return_value = await func(*args, **kwargs)
                coordinator.on_success(context)
                return context.return_value

        else:

            @functools.wraps(func)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                context = _context(args, kwargs)
                coordinator.on_entry(context)
                if context.skip_body:
                    return context.return_value
                context.return_value = func(*args, **kwargs)
                coordinator.on_success(context)
                return context.return_value

        wrapper.key_builder = key_builder  # type: ignore[attr-defined]
        wrapper.coordinator = coordinator  # type: ignore[attr-defined]
        wrapper.cache_service = service  # type: ignore[attr-defined]
        return wrapper  # type: ignore[return-value]

    return decorator

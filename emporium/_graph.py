"""
Graph runner — one-shot resolution of a nodnod node.

    @node
    class Subtotal:
        @classmethod
        async def __compose__(cls, cart: Cart) -> "Subtotal": ...

    subtotal = await compose(Subtotal, cart)

The target's dependencies are discovered from its __compose__ signature;
`inputs` seed the scope under their runtime type.
"""

from __future__ import annotations

from typing import Any, cast

from nodnod import Scope, Value, EventLoopAgent, Node
from nodnod import scalar_node as node


async def compose[T](target: type[T], *inputs: object) -> T:
    """
    Resolve `target` and everything it depends on.

    Note: The scope is cleared on exit, so the result is read inside it.
    """
    agent = EventLoopAgent.build({cast(type[Node[Any, Any]], target)})

    async with Scope(detail=target.__name__) as scope:
        for value in inputs:
            scope.push(Value(type(value), value))
        await agent.run(scope, {})

        resolved = scope.get(target)
        if resolved is None:
            raise LookupError(f"{target.__name__} was not resolved")
        return cast(T, resolved.value)


__all__ = ("node", "compose")

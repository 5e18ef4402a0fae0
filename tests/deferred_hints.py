"""
Controllers declared under postponed annotations, with hints that only
resolve for type checkers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from rpc_controllers.controller.decorators import Ctx, Input, Query

if TYPE_CHECKING:
    from decimal import Decimal


class Pricing:
    @Query()
    def total(self, ctx: Annotated[dict, Ctx()], input: Annotated[Decimal, Input()]) -> Decimal:
        return ctx["base"] + input


class Unreadable:
    @Query()
    def broken(self, input: Annotated[dict, Missing.schema, Input()]):
        return input

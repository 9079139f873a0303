"""
Cart operations — what a mutate() call asks for.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AddItem:
    """Add `quantity` more units (new line or existing)."""

    quantity: int = 1


@dataclass(frozen=True, slots=True)
class SetQuantity:
    """Absolute quantity. 0 or below routes to removal."""

    quantity: int


@dataclass(frozen=True, slots=True)
class RemoveItem:
    pass


type CartOp = AddItem | SetQuantity | RemoveItem


__all__ = ("AddItem", "SetQuantity", "RemoveItem", "CartOp")

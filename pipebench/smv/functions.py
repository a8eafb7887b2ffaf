"""
pipebench -- SMV Functions

Functions that Apply, Cumulate and Window nodes evaluate, together with
their SMV rendering. Arithmetic wraps around the value domain so that
every result stays inside 0..domain_size-1.
"""

from __future__ import annotations

import enum


class Function(enum.StrEnum):
    ADDITION = "addition"
    MULTIPLICATION = "multiplication"
    IS_GREATER_OR_EQUAL = "is_greater_or_equal"
    EQUALS = "equals"
    IS_EVEN = "is_even"

    @property
    def arity(self) -> int:
        return 1 if self is Function.IS_EVEN else 2

    @property
    def returns_boolean(self) -> bool:
        return self in (
            Function.IS_GREATER_OR_EQUAL,
            Function.EQUALS,
            Function.IS_EVEN,
        )

    def render(self, args: list[str], domain_size: int) -> str:
        """Render the application of this function to SMV operand expressions."""
        if len(args) != self.arity:
            raise ValueError(f"{self.value} expects {self.arity} operands, got {len(args)}")
        if self is Function.ADDITION:
            return f"({args[0]} + {args[1]}) mod {domain_size}"
        if self is Function.MULTIPLICATION:
            return f"({args[0]} * {args[1]}) mod {domain_size}"
        if self is Function.IS_GREATER_OR_EQUAL:
            return f"{args[0]} >= {args[1]}"
        if self is Function.EQUALS:
            return f"{args[0]} = {args[1]}"
        return f"{args[0]} mod 2 = 0"

"""First-match-wins rule chains.

Style detection is expressed as ordered tuples of :class:`Rule` objects rather
than nested conditionals. A chain is evaluated top to bottom and the first
rule whose ``apply`` returns something other than ``None`` decides the
classification. Supporting a new convention means inserting a rule, not
editing control flow.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class Rule(Generic[T, R]):
    """A named classifier step.

    Attributes:
        name: Short identifier, used in debug logging and tests.
        apply: Returns the classification when the rule matches, else None.
    """

    name: str
    apply: Callable[[T], R | None]

    def __call__(self, subject: T) -> R | None:
        return self.apply(subject)


def first_match(rules: Iterable[Rule[T, R]], subject: T) -> tuple[str, R] | None:
    """Evaluate ``rules`` in order and return ``(rule name, result)`` of the first hit."""
    for rule in rules:
        result = rule.apply(subject)
        if result is not None:
            return rule.name, result
    return None


__all__ = ["Rule", "first_match"]

"""
Ordered fallback chains for field extraction.

Each canonical field (artwork, audio URL, show notes, ...) is resolved by a
list of small rule functions tried in order. The first rule whose value is
non-empty -- after the chain's transform, e.g. URL normalization -- wins.
Keeping the precedence as data makes it auditable and lets each rule be
tested on its own.

Example:
    >>> chain = FallbackChain("title", [
    ...     Rule("title", lambda node: node.get("title")),
    ...     Rule("default", lambda node: "Untitled"),
    ... ])
    >>> chain.resolve({})
    'Untitled'
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Rule:
    """
    A single named candidate producer.

    Attributes:
        name: Short label used in debug output (e.g. "itunes:image")
        extract: Callable returning a candidate value, or a falsy value
    """

    name: str
    extract: Callable[..., Any]


class FallbackChain:
    """
    Lazily evaluates rules in order until one yields a non-empty string.

    Attributes:
        name: Field name the chain resolves
        rules: Rules in precedence order
        transform: Applied to every candidate before the emptiness check
    """

    def __init__(
        self,
        name: str,
        rules: Sequence[Rule],
        transform: Optional[Callable[[str], str]] = None,
    ) -> None:
        self.name = name
        self.rules = tuple(rules)
        self.transform = transform

    def resolve_with_source(self, *args: Any) -> Tuple[str, Optional[str]]:
        """
        Resolve the field and report which rule produced it.

        Returns:
            Tuple of (value, rule name); ``("", None)`` if every rule was empty
        """
        for rule in self.rules:
            candidate = rule.extract(*args)
            value = str(candidate) if candidate else ""
            if self.transform is not None:
                value = self.transform(value)
            if value:
                return value, rule.name
        return "", None

    def resolve(self, *args: Any) -> str:
        """Resolve the field, returning ``""`` if no rule matched."""
        value, _ = self.resolve_with_source(*args)
        return value

    @property
    def rule_names(self) -> Tuple[str, ...]:
        return tuple(rule.name for rule in self.rules)

    def __repr__(self) -> str:
        return f"FallbackChain({self.name!r}, rules={list(self.rule_names)})"

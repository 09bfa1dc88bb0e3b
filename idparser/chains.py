"""
Fallback Chains
===============
Ordered strategy lists used to resolve one field.

Each strategy is a named callable ``text -> Optional[str]``. A chain tries
its strategies in order and stops at the first one that produces a
non-empty value; later strategies only run when earlier ones fail.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

logger = logging.getLogger(__name__)

Matcher = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class Strategy:
    """A single named way of finding a field value."""
    name: str
    matcher: Matcher

    def __call__(self, text: str) -> Optional[str]:
        value = self.matcher(text)
        if value is None:
            return None
        value = value.strip()
        return value or None


class FallbackChain:
    """First-success evaluation over an ordered list of strategies."""

    def __init__(self, field_name: str, strategies: Iterable[Strategy]):
        self.field_name = field_name
        self.strategies = tuple(strategies)

    def __len__(self) -> int:
        return len(self.strategies)

    def resolve(self, text: str) -> Optional[str]:
        for strategy in self.strategies:
            value = strategy(text)
            if value is not None:
                logger.debug(
                    f"{self.field_name}: matched by '{strategy.name}'"
                )
                return value

        logger.debug(f"{self.field_name}: no strategy matched")
        return None


def regex_strategy(
    name: str,
    pattern: re.Pattern,
    transform: Optional[Callable[[re.Match], Optional[str]]] = None,
) -> Strategy:
    """
    Wrap a compiled pattern as a strategy.

    Without a transform the first capture group is returned, or the whole
    match when the pattern has no groups.
    """

    def _match(text: str) -> Optional[str]:
        match = pattern.search(text)
        if not match:
            return None
        if transform is not None:
            return transform(match)
        return match.group(1) if pattern.groups else match.group(0)

    return Strategy(name=name, matcher=_match)


def regex_strategies(
    name: str,
    patterns: Iterable[re.Pattern],
) -> list[Strategy]:
    """One strategy per pattern, named ``name[0]``, ``name[1]``, ..."""
    return [
        regex_strategy(f"{name}[{index}]", pattern)
        for index, pattern in enumerate(patterns)
    ]

"""Source mix policy.

A single object holding every allocation constant of the feed: the target
fraction of the page each provider should fill, and the positional rules the
interleaver uses to blend the per-source lists.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field

from newsdeck.core.config import Settings
from newsdeck.core.exceptions import SourceMixPolicyError
from newsdeck.core.constants import SourceName

_FRACTION_TOLERANCE = 1e-6


@dataclass(frozen=True)
class InterleaveRule:
    """Place the next item of ``source`` at 1-based positions divisible by ``divisor``."""

    divisor: int
    source: SourceName

    def matches(self, position: int) -> bool:
        return position % self.divisor == 0


DEFAULT_FRACTIONS: dict[SourceName, float] = {
    SourceName.NEWSAPI: 0.30,
    SourceName.NEWSDATA: 0.25,
    SourceName.PA_MEDIA: 0.20,
    SourceName.YOUTUBE: 0.15,
    SourceName.BRAVE: 0.10,
}

# Highest priority first
DEFAULT_RULES: tuple[InterleaveRule, ...] = (
    InterleaveRule(divisor=7, source=SourceName.BRAVE),
    InterleaveRule(divisor=5, source=SourceName.YOUTUBE),
    InterleaveRule(divisor=4, source=SourceName.PA_MEDIA),
    InterleaveRule(divisor=3, source=SourceName.NEWSDATA),
)

DEFAULT_FALLBACK_ORDER: tuple[SourceName, ...] = (
    SourceName.NEWSAPI,
    SourceName.NEWSDATA,
    SourceName.PA_MEDIA,
    SourceName.BRAVE,
    SourceName.YOUTUBE,
)


@dataclass(frozen=True)
class SourceMixPolicy:
    """Allocation and interleaving constants for one feed configuration.

    Attributes:
        fractions: Target share of the page per source; sums to 1.0.
            Sources with a zero share are disabled.
        rules: Positional interleaving rules, highest priority first
        default_source: Source used at positions no rule claims
        fallback_order: Order in which other sources fill a position whose
            designated source is exhausted
    """

    fractions: Mapping[SourceName, float]
    rules: tuple[InterleaveRule, ...] = DEFAULT_RULES
    default_source: SourceName = SourceName.NEWSAPI
    fallback_order: tuple[SourceName, ...] = field(default=DEFAULT_FALLBACK_ORDER)

    def __post_init__(self) -> None:
        if not self.fractions:
            raise SourceMixPolicyError("source mix must name at least one source")

        negative = [source.value for source, share in self.fractions.items() if share < 0]
        if negative:
            raise SourceMixPolicyError(f"negative target fraction for: {', '.join(negative)}")

        total = sum(self.fractions.values())
        if abs(total - 1.0) > _FRACTION_TOLERANCE:
            raise SourceMixPolicyError(f"target fractions must sum to 1.0, got {total:.4f}")

        for rule in self.rules:
            if rule.divisor < 1:
                raise SourceMixPolicyError(f"rule divisor must be positive, got {rule.divisor}")

        known = set(SourceName)
        if not set(self.fallback_order) <= known or self.default_source not in known:
            raise SourceMixPolicyError("fallback order references an unknown source")

    @classmethod
    def default(cls) -> "SourceMixPolicy":
        return cls(fractions=dict(DEFAULT_FRACTIONS))

    @classmethod
    def from_mapping(cls, fractions: Mapping[str, float]) -> "SourceMixPolicy":
        """Build a policy from raw ``{source name: fraction}`` settings.

        Raises:
            SourceMixPolicyError: If a source name is unknown or the fractions
                are invalid
        """
        parsed: dict[SourceName, float] = {}
        for name, share in fractions.items():
            try:
                parsed[SourceName(name)] = float(share)
            except ValueError as e:
                raise SourceMixPolicyError(f"unknown source in source mix: {name!r}") from e
        return cls(fractions=parsed)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SourceMixPolicy":
        return cls.from_mapping(settings.source_mix)

    @property
    def enabled_sources(self) -> list[SourceName]:
        """Sources with a positive share, in fallback order."""
        ordered = [s for s in self.fallback_order if self.fractions.get(s, 0.0) > 0]
        extra = [s for s, share in self.fractions.items() if share > 0 and s not in ordered]
        return ordered + extra

    def target_counts(self, page_size: int) -> dict[SourceName, int]:
        """Articles each enabled source is asked for: ``ceil(page_size * share)``."""
        return {
            source: max(1, math.ceil(page_size * self.fractions[source]))
            for source in self.enabled_sources
        }

    def restricted_to(self, source: SourceName) -> "SourceMixPolicy":
        """Policy giving the whole page to a single source."""
        return SourceMixPolicy(
            fractions={source: 1.0},
            rules=self.rules,
            default_source=self.default_source,
            fallback_order=self.fallback_order,
        )

    def candidates_for(self, position: int) -> list[SourceName]:
        """Sources to try, in order, for a 1-based output position."""
        designated = self.default_source
        for rule in self.rules:
            if rule.matches(position):
                designated = rule.source
                break

        ordered = [designated]
        ordered.extend(s for s in self.fallback_order if s != designated)
        ordered.extend(s for s in self.fractions if s not in ordered)
        return ordered

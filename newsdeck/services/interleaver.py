"""Deterministic interleaving of per-source article lists."""

from collections.abc import Mapping, Sequence

from newsdeck.core.constants import SourceName
from newsdeck.models.domain.article import Article
from newsdeck.services.source_mix import SourceMixPolicy


def interleave(
    source_lists: Mapping[SourceName, Sequence[Article]],
    page_size: int,
    policy: SourceMixPolicy | None = None,
) -> list[Article]:
    """Merge per-source lists into one page following the positional policy.

    Walks output positions ``1..page_size``. Each position takes the next
    item from the source designated by the first matching rule (or the
    default source); when that source is exhausted the position is filled
    from the policy's fallback order instead. Output is shorter than
    ``page_size`` only when every list runs out, and never contains gaps.

    Args:
        source_lists: Ordered articles per source; sources may be missing
        page_size: Maximum number of articles to place
        policy: Interleaving policy (default policy when omitted)

    Returns:
        The interleaved page
    """
    policy = policy or SourceMixPolicy.default()
    cursors = {source: 0 for source in source_lists}
    page: list[Article] = []

    def remaining(source: SourceName) -> bool:
        return source in source_lists and cursors[source] < len(source_lists[source])

    for position in range(1, page_size + 1):
        source = next((s for s in policy.candidates_for(position) if remaining(s)), None)
        if source is None:
            break

        page.append(source_lists[source][cursors[source]])
        cursors[source] += 1

    return page

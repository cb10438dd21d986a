import logging
from typing import List, Sequence

logger = logging.getLogger(__name__)


def zip_levels(first: Sequence, second: Sequence) -> list:
    """
    Interleave two ranked lists: first[0], second[0], first[1], second[1], ...

    If the lists have different lengths the trailing part of the longer one is
    appended in its existing order.
    """
    shortest = min(len(first), len(second))
    zipped = []
    for a, b in zip(first[:shortest], second[:shortest]):
        zipped.extend([a, b])
    longer = first if len(first) > len(second) else second
    zipped.extend(longer[shortest:])
    return zipped


def select_balanced(buckets: List[Sequence], n_levels, tail: Sequence = ()) -> list:
    """
    Combine one or two polarity buckets and keep the first n_levels.

    Levels in tail follow the combined buckets unchanged. Asking for more
    levels than exist returns all of them.
    """
    if not buckets:
        out = []
    elif len(buckets) == 1:
        out = list(buckets[0])
    else:
        out = zip_levels(buckets[0], buckets[1])
    out.extend(tail)
    if len(out) > n_levels:
        out = out[: int(n_levels)]
    logger.debug(f"Kept {len(out)} levels from buckets of sizes {[len(b) for b in buckets]}")
    return out

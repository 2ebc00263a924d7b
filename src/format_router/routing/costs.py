"""Edge cost model for the route graph."""

from __future__ import annotations

from format_router.schemas import FileFormat, RoutingCostConfig
from format_router.types import Category


def category_change_cost(
    source: tuple[Category, ...],
    target: tuple[Category, ...],
    config: RoutingCostConfig,
) -> float:
    """Return the penalty for moving between two category sets.

    Parameters
    ----------
    source : tuple[str, ...]
        Categories of the format being read.
    target : tuple[str, ...]
        Categories of the format being written.
    config : RoutingCostConfig
        Cost table, default cost, and policy switch.

    Returns
    -------
    float
        Non-negative category change cost.

    Notes
    -----
    With the soft policy, overlapping sets are free and otherwise the cheapest
    matching table entry wins (default cost when none match). With
    ``category_hard_search`` every (source, target) category pair, identical
    pairs included, is charged its table cost or the default and the charges
    are summed.
    """
    if not source and not target:
        return 0.0
    if not source or not target:
        return config.default_category_change_cost

    table = {(entry.from_, entry.to): entry.cost for entry in config.category_change_costs}

    if config.category_hard_search:
        total = 0.0
        for src in source:
            for dst in target:
                total += table.get((src, dst), config.default_category_change_cost)
        return total

    if set(source) & set(target):
        return 0.0
    matches = [
        table[(src, dst)] for src in source for dst in target if (src, dst) in table
    ]
    if not matches:
        return config.default_category_change_cost
    return min(matches)


def edge_cost(
    source: FileFormat,
    target: FileFormat,
    handler_rank: int,
    config: RoutingCostConfig,
) -> float:
    """Compute the traversal cost of converting ``source`` into ``target``.

    ``handler_rank`` is the handler's 0-based position in the catalog; later
    handlers pay ``priority_cost`` per rank. Lossy targets scale the whole
    cost by ``lossy_multiplier``.
    """
    cost = config.depth_cost
    cost += category_change_cost(source.categories, target.categories, config)
    cost += config.priority_cost * handler_rank
    if not target.lossless:
        cost *= config.lossy_multiplier
    return cost

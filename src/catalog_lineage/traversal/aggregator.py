"""Merging of per-direction lineage results."""

from typing import List, Sequence

from .context import LineageContext
from .model import LineageDirection, LineageGraph


def sub_walk_directions(direction: LineageDirection) -> List[LineageDirection]:
    """BOTH is resolved as an independent INPUT walk followed by an OUTPUT walk"""
    if direction == LineageDirection.BOTH:
        return [LineageDirection.INPUT, LineageDirection.OUTPUT]
    return [direction]


def aggregate(context: LineageContext, results: Sequence[LineageGraph]) -> LineageGraph:
    """
    Produce the final lineage graph for a request.

    A single-direction request returns its one sub-walk unchanged. For BOTH,
    entity maps and relation sets are unioned into a graph tagged BOTH.
    """
    if len(results) == 1 and context.direction != LineageDirection.BOTH:
        return results[0]

    ret = LineageGraph(context.guid, LineageDirection.BOTH, context.requested_depth)
    for result in results:
        ret.merge(result)
    return ret

"""Fetch strategies for loading orders with their member and delivery.

Each strategy trades query count against how tightly the repository query is
coupled to one response shape. ``STRATEGY_PROFILES`` records the trade-off for
every strategy and ``QUERY_SELECTION_ORDER`` records which one to reach for
first and where to go when it is not fast enough.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

# Round trips for any strategy once every member and delivery is already in the
# request's identity map: the order query alone.
PRELOADED_QUERY_COUNT = 1


class FetchStrategy(StrEnum):
    ENTITY = "entity"
    ENTITY_TO_SUMMARY = "entity_to_summary"
    FETCH_JOIN = "fetch_join"
    DIRECT_PROJECTION = "direct_projection"


class StrategyProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    strategy: FetchStrategy
    version: str  # endpoint version, e.g. "v3"
    returns_entities: bool
    per_item_resolution: bool  # member and delivery loaded one order at a time
    materializes_associations: bool
    reusable_query: bool  # repository query usable by other consumers as-is
    recommended: bool
    summary: str

    def max_queries(self, result_count: int) -> int:
        """Worst-case store round trips for ``result_count`` orders."""
        if self.per_item_resolution:
            return PRELOADED_QUERY_COUNT + 2 * result_count
        return PRELOADED_QUERY_COUNT


STRATEGY_PROFILES: dict[FetchStrategy, StrategyProfile] = {
    FetchStrategy.ENTITY: StrategyProfile(
        strategy=FetchStrategy.ENTITY,
        version="v1",
        returns_entities=True,
        per_item_resolution=True,
        materializes_associations=True,
        reusable_query=True,
        recommended=False,
        summary=(
            "Naive baseline. Returns entities and resolves member and delivery "
            "per order, costing up to 1 + 2N queries. Exists to show the N+1 "
            "problem; do not expose entities in production responses."
        ),
    ),
    FetchStrategy.ENTITY_TO_SUMMARY: StrategyProfile(
        strategy=FetchStrategy.ENTITY_TO_SUMMARY,
        version="v2",
        returns_entities=False,
        per_item_resolution=True,
        materializes_associations=True,
        reusable_query=True,
        recommended=False,
        summary=(
            "Maps entities to summaries, so the response no longer depends on "
            "the entity graph. Still up to 1 + 2N queries unless the "
            "associations were already loaded earlier in the same request."
        ),
    ),
    FetchStrategy.FETCH_JOIN: StrategyProfile(
        strategy=FetchStrategy.FETCH_JOIN,
        version="v3",
        returns_entities=False,
        per_item_resolution=False,
        materializes_associations=True,
        reusable_query=True,
        recommended=True,
        summary=(
            "Preferred default. One query joins orders with member and "
            "delivery. The join directive is added to the general-purpose "
            "order fetch, so the repository stays reusable."
        ),
    ),
    FetchStrategy.DIRECT_PROJECTION: StrategyProfile(
        strategy=FetchStrategy.DIRECT_PROJECTION,
        version="v4",
        returns_entities=False,
        per_item_resolution=False,
        materializes_associations=False,
        reusable_query=False,
        recommended=False,
        summary=(
            "Last resort. One query selects exactly the summary columns. The "
            "gain over a fetch join is marginal and the query is tied to this "
            "response shape. Past this point, write a native query."
        ),
    ),
}

# Start with entity-to-summary mapping, add a fetch join when the query count
# hurts, then a direct projection. A native query comes after the last entry.
QUERY_SELECTION_ORDER: tuple[FetchStrategy, ...] = (
    FetchStrategy.ENTITY_TO_SUMMARY,
    FetchStrategy.FETCH_JOIN,
    FetchStrategy.DIRECT_PROJECTION,
)

DEFAULT_STRATEGY = FetchStrategy.FETCH_JOIN


def escalate(strategy: FetchStrategy) -> FetchStrategy | None:
    """Return the next strategy to try when ``strategy`` is not fast enough.

    ``None`` means the selection order is exhausted and only a native query is
    left. ``ENTITY`` is not part of the order; it escalates to the first entry.
    """
    if strategy not in QUERY_SELECTION_ORDER:
        return QUERY_SELECTION_ORDER[0]
    position = QUERY_SELECTION_ORDER.index(strategy)
    if position + 1 < len(QUERY_SELECTION_ORDER):
        return QUERY_SELECTION_ORDER[position + 1]
    return None

from loguru import logger

from src.application.order_mapper import map_order_to_summary
from src.domain.fetch_strategy import (
    PRELOADED_QUERY_COUNT,
    STRATEGY_PROFILES,
    FetchStrategy,
)
from src.domain.order import Order, OrderSearchCriteria, OrderSummary
from src.infrastructure.order_repository import OrderRepository
from src.shared.decorators import log_errors


class OrderQueryService:
    """Loads orders with their member and delivery under one of four fetch strategies.

    All four return the same data for the same criteria; they differ only in
    how many store round trips they take and what they return. See
    ``STRATEGY_PROFILES`` for the trade-offs.
    """

    def __init__(self, repository: OrderRepository) -> None:
        self._repository = repository

    @log_errors
    def find_orders(self, criteria: OrderSearchCriteria) -> list[Order]:
        """ENTITY: fetch orders, then resolve member and delivery one order at a time.

        Up to 1 + 2N queries; associations already loaded in this request are free.
        """
        orders = [
            self._repository.resolve(order)
            for order in self._repository.find_orders(criteria)
        ]
        self._log_cost(FetchStrategy.ENTITY, len(orders))
        return orders

    @log_errors
    def find_summaries(self, criteria: OrderSearchCriteria) -> list[OrderSummary]:
        """ENTITY_TO_SUMMARY: same fetch as ``find_orders``, mapped to summaries."""
        summaries = [
            map_order_to_summary(self._repository.resolve(order))
            for order in self._repository.find_orders(criteria)
        ]
        self._log_cost(FetchStrategy.ENTITY_TO_SUMMARY, len(summaries))
        return summaries

    @log_errors
    def find_summaries_fetch_join(
        self, criteria: OrderSearchCriteria
    ) -> list[OrderSummary]:
        """FETCH_JOIN: one query with member and delivery joined, then mapped."""
        summaries = [
            map_order_to_summary(order)
            for order in self._repository.find_orders_fetch(criteria)
        ]
        self._log_cost(FetchStrategy.FETCH_JOIN, len(summaries))
        return summaries

    @log_errors
    def find_summaries_direct(
        self, criteria: OrderSearchCriteria
    ) -> list[OrderSummary]:
        """DIRECT_PROJECTION: one query selecting the summary columns only."""
        summaries = self._repository.find_order_summaries(criteria)
        self._log_cost(FetchStrategy.DIRECT_PROJECTION, len(summaries))
        return summaries

    def run(
        self, strategy: FetchStrategy, criteria: OrderSearchCriteria
    ) -> list[Order] | list[OrderSummary]:
        """Dispatch to the method implementing ``strategy``."""
        handlers = {
            FetchStrategy.ENTITY: self.find_orders,
            FetchStrategy.ENTITY_TO_SUMMARY: self.find_summaries,
            FetchStrategy.FETCH_JOIN: self.find_summaries_fetch_join,
            FetchStrategy.DIRECT_PROJECTION: self.find_summaries_direct,
        }
        return handlers[strategy](criteria)

    def _log_cost(self, strategy: FetchStrategy, result_count: int) -> None:
        profile = STRATEGY_PROFILES[strategy]
        logger.info(
            f"[{profile.version}:{strategy}] {result_count} order(s) | "
            f"{self._repository.query_count} query(ies) "
            f"(min {PRELOADED_QUERY_COUNT}, max {profile.max_queries(result_count)})"
        )

from loguru import logger

from src.application.order_mapper import map_row_to_summary
from src.domain.errors import UnresolvedAssociationError
from src.domain.interfaces import IStoreSession
from src.domain.order import Order, OrderSearchCriteria, OrderSummary, Resolved


class OrderRepository:
    """Reads orders through a request-scoped store session."""

    # Join directive for the fetch-join query
    FETCH_MEMBER_DELIVERY = frozenset({"member", "delivery"})

    # Columns selected by ``find_order_summaries``. This mapping mirrors the
    # OrderSummary fields one-to-one and has no other consumer.
    SUMMARY_COLUMNS: dict[str, str] = {
        "order_id": "order.id",
        "member_name": "member.name",
        "order_date": "order.order_date",
        "status": "order.status",
        "address": "delivery.address",
    }

    def __init__(self, session: IStoreSession) -> None:
        self._session = session

    @property
    def query_count(self) -> int:
        return self._session.query_count

    def find_orders(self, criteria: OrderSearchCriteria) -> list[Order]:
        """Return matching orders with member and delivery left Unresolved."""
        return self._session.find_orders(criteria)

    def find_orders_fetch(self, criteria: OrderSearchCriteria) -> list[Order]:
        """Return matching orders with member and delivery joined in the same query."""
        return self._session.find_orders(criteria, fetch=self.FETCH_MEMBER_DELIVERY)

    def find_order_summaries(self, criteria: OrderSearchCriteria) -> list[OrderSummary]:
        """Select the summary columns directly, skipping entity materialization."""
        rows = self._session.project(self.SUMMARY_COLUMNS, criteria)
        return [map_row_to_summary(row) for row in rows]

    def resolve(self, order: Order) -> Order:
        """Load member then delivery for ``order``.

        Associations already in the session's identity map cost nothing;
        each miss costs one query. A missing row raises
        ``UnresolvedAssociationError`` carrying the order id.
        """
        if not isinstance(order.member, Resolved):
            try:
                order = order.with_member(self._session.resolve_member(order.member_id))
            except UnresolvedAssociationError as exc:
                raise UnresolvedAssociationError("member", order.id, exc.target_id) from exc

        if not isinstance(order.delivery, Resolved):
            try:
                order = order.with_delivery(
                    self._session.resolve_delivery(order.delivery_id)
                )
            except UnresolvedAssociationError as exc:
                raise UnresolvedAssociationError("delivery", order.id, exc.target_id) from exc

        logger.debug(f"Order {order.id} resolved ({self.query_count} query(ies) so far)")
        return order

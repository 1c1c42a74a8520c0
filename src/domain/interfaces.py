from collections.abc import Mapping
from contextlib import AbstractContextManager
from typing import Any, Protocol

from .order import Delivery, Member, Order, OrderSearchCriteria


class IStoreSession(Protocol):
    """Request-scoped view of the entity store.

    Every method that reaches the store counts as one query in ``query_count``.
    Members and deliveries loaded during the session are kept in its identity
    map, so resolving them again is free.
    """

    @property
    def query_count(self) -> int: ...

    def find_orders(
        self,
        criteria: OrderSearchCriteria,
        fetch: frozenset[str] = frozenset(),
    ) -> list[Order]:
        """Return matching orders in primary-key order.

        ``fetch`` holds join directives (``"member"``, ``"delivery"``). Joined
        associations come back Resolved and enter the identity map; the rest
        come back Unresolved and must go through ``resolve_member`` /
        ``resolve_delivery``.
        """
        ...

    def resolve_member(self, member_id: int) -> Member: ...

    def resolve_delivery(self, delivery_id: int) -> Delivery: ...

    def project(
        self,
        columns: Mapping[str, str],
        criteria: OrderSearchCriteria,
    ) -> list[dict[str, Any]]:
        """Select ``{output_key: "entity.field"}`` columns without materializing entities."""
        ...


class IEntityStore(Protocol):
    def open_session(self) -> AbstractContextManager[IStoreSession]:
        """Open a session scoped to one request."""
        ...

"""In-memory entity store with request-scoped sessions.

Tables hold plain rows. A ``StoreSession`` turns rows into Member and Delivery
entities on demand, keeps them in an identity map for the rest of the request,
and counts every round trip so callers can see what a fetch strategy costs.
"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from loguru import logger

from src.domain.errors import StoreUnavailableError, UnresolvedAssociationError
from src.domain.order import (
    Delivery,
    Member,
    Order,
    OrderSearchCriteria,
    OrderStatus,
    Resolved,
    Unresolved,
)
from src.shared.decorators import store_query

JOINABLE: frozenset[str] = frozenset({"member", "delivery"})

_COLUMNS: dict[str, frozenset[str]] = {
    "order": frozenset({"id", "member_id", "delivery_id", "order_date", "status"}),
    "member": frozenset({"id", "name"}),
    "delivery": frozenset({"id", "address"}),
}


class InMemoryEntityStore:
    """Holds order, member and delivery rows keyed by primary key."""

    def __init__(self) -> None:
        self._orders: dict[int, dict[str, Any]] = {}
        self._members: dict[int, dict[str, Any]] = {}
        self._deliveries: dict[int, dict[str, Any]] = {}
        # Flip to False to simulate a store that cannot be reached
        self.available = True

    def add_member(self, member: Member) -> None:
        self._members[member.id] = member.model_dump()

    def add_delivery(self, delivery: Delivery) -> None:
        self._deliveries[delivery.id] = delivery.model_dump()

    def add_order(
        self,
        order_id: int,
        member_id: int,
        delivery_id: int,
        order_date: datetime,
        status: OrderStatus = OrderStatus.OPEN,
    ) -> None:
        """Insert an order row. References are not checked, so dangling rows are allowed."""
        self._orders[order_id] = {
            "id": order_id,
            "member_id": member_id,
            "delivery_id": delivery_id,
            "order_date": order_date,
            "status": status,
        }

    def order_rows(self) -> list[dict[str, Any]]:
        return [self._orders[key] for key in sorted(self._orders)]

    def member_row(self, member_id: int) -> dict[str, Any] | None:
        return self._members.get(member_id)

    def delivery_row(self, delivery_id: int) -> dict[str, Any] | None:
        return self._deliveries.get(delivery_id)

    @contextmanager
    def open_session(self) -> Iterator["StoreSession"]:
        """Open a request-scoped session. Its identity map dies with it."""
        session = StoreSession(self)
        try:
            yield session
        finally:
            logger.debug(f"Store session closed after {session.query_count} query(ies)")


class StoreSession:
    """One request's view of the store. Not shared between requests."""

    def __init__(self, store: InMemoryEntityStore) -> None:
        self._store = store
        self._query_count = 0
        self._members: dict[int, Member] = {}
        self._deliveries: dict[int, Delivery] = {}
        self.executed: list[str] = []

    @property
    def query_count(self) -> int:
        return self._query_count

    @property
    def materialized(self) -> dict[str, int]:
        """Number of Member and Delivery entities built during this session."""
        return {"member": len(self._members), "delivery": len(self._deliveries)}

    def _before_query(self, description: str) -> None:
        if not self._store.available:
            raise StoreUnavailableError(f"entity store unavailable ({description})")
        self._query_count += 1
        self.executed.append(description)
        logger.debug(f"Query #{self._query_count}: {description}")

    # ------------------------------------------------------------------
    # Entity fetches
    # ------------------------------------------------------------------

    @store_query("select orders")
    def find_orders(
        self,
        criteria: OrderSearchCriteria,
        fetch: frozenset[str] = frozenset(),
    ) -> list[Order]:
        if unknown := fetch - JOINABLE:
            raise ValueError(f"Unknown join directive(s): {sorted(unknown)}")
        if fetch:
            logger.debug(f"Join fetch: {sorted(fetch)}")

        orders: list[Order] = []
        for row in self._store.order_rows():
            if not self._matches(row, criteria):
                continue

            member: Unresolved | Resolved[Member] = Unresolved(id=row["member_id"])
            if "member" in fetch:
                member = Resolved[Member](value=self._materialize_member(row))

            delivery: Unresolved | Resolved[Delivery] = Unresolved(id=row["delivery_id"])
            if "delivery" in fetch:
                delivery = Resolved[Delivery](value=self._materialize_delivery(row))

            orders.append(
                Order(
                    id=row["id"],
                    member=member,
                    delivery=delivery,
                    order_date=row["order_date"],
                    status=row["status"],
                )
            )
        return orders

    def resolve_member(self, member_id: int) -> Member:
        """Return the member from the identity map, loading it on a miss."""
        if (member := self._members.get(member_id)) is not None:
            return member
        return self._load_member(member_id)

    def resolve_delivery(self, delivery_id: int) -> Delivery:
        """Return the delivery from the identity map, loading it on a miss."""
        if (delivery := self._deliveries.get(delivery_id)) is not None:
            return delivery
        return self._load_delivery(delivery_id)

    @store_query("select member by id")
    def _load_member(self, member_id: int) -> Member:
        raw = self._store.member_row(member_id)
        if raw is None:
            raise UnresolvedAssociationError("member", None, member_id)
        member = self._members[member_id] = Member.model_validate(raw)
        return member

    @store_query("select delivery by id")
    def _load_delivery(self, delivery_id: int) -> Delivery:
        raw = self._store.delivery_row(delivery_id)
        if raw is None:
            raise UnresolvedAssociationError("delivery", None, delivery_id)
        delivery = self._deliveries[delivery_id] = Delivery.model_validate(raw)
        return delivery

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    @store_query("select projection")
    def project(
        self,
        columns: Mapping[str, str],
        criteria: OrderSearchCriteria,
    ) -> list[dict[str, Any]]:
        """Select ``{output_key: "entity.field"}`` columns over orders joined
        with member and delivery. Reads rows only; the identity map is untouched.
        """
        selected = {key: self._parse_column(path) for key, path in columns.items()}

        rows: list[dict[str, Any]] = []
        for order_row in self._store.order_rows():
            # Filter first, like find_orders: excluded rows are never joined
            if not self._matches(order_row, criteria):
                continue
            joined = {
                "order": order_row,
                "member": self._joined_row("member", order_row),
                "delivery": self._joined_row("delivery", order_row),
            }
            rows.append(
                {key: joined[entity][field] for key, (entity, field) in selected.items()}
            )
        return rows

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_column(path: str) -> tuple[str, str]:
        entity, _, field = path.partition(".")
        if field not in _COLUMNS.get(entity, frozenset()):
            raise ValueError(f"Unknown column: {path!r}")
        return entity, field

    def _joined_row(self, entity: str, order_row: dict[str, Any]) -> dict[str, Any]:
        target_id = order_row[f"{entity}_id"]
        raw = (
            self._store.member_row(target_id)
            if entity == "member"
            else self._store.delivery_row(target_id)
        )
        if raw is None:
            raise UnresolvedAssociationError(entity, order_row["id"], target_id)
        return raw

    def _matches(self, row: dict[str, Any], criteria: OrderSearchCriteria) -> bool:
        if criteria.member_name is None:
            return criteria.matches(row["status"], "")
        member = self._joined_row("member", row)
        return criteria.matches(row["status"], member["name"])

    def _materialize_member(self, order_row: dict[str, Any]) -> Member:
        member_id = order_row["member_id"]
        if (member := self._members.get(member_id)) is None:
            raw = self._joined_row("member", order_row)
            member = self._members[member_id] = Member.model_validate(raw)
        return member

    def _materialize_delivery(self, order_row: dict[str, Any]) -> Delivery:
        delivery_id = order_row["delivery_id"]
        if (delivery := self._deliveries.get(delivery_id)) is None:
            raw = self._joined_row("delivery", order_row)
            delivery = self._deliveries[delivery_id] = Delivery.model_validate(raw)
        return delivery

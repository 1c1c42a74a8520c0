from datetime import datetime
from enum import StrEnum
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from src.domain.errors import UnresolvedAssociationError

T = TypeVar("T")


class OrderStatus(StrEnum):
    OPEN = "OPEN"
    CANCELED = "CANCELED"


class Address(BaseModel):
    """Embedded value type: no identity of its own, always owned by a Delivery."""

    model_config = ConfigDict(frozen=True)

    street: str
    city: str
    zip: str


class Member(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str


class Delivery(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    address: Address


class Unresolved(BaseModel):
    """Association whose target has not been loaded yet. Only the key is known."""

    model_config = ConfigDict(frozen=True)

    state: Literal["unresolved"] = "unresolved"
    id: int


class Resolved(BaseModel, Generic[T]):
    """Association whose target has been loaded into the current session."""

    model_config = ConfigDict(frozen=True)

    state: Literal["resolved"] = "resolved"
    value: T


MemberRef = Unresolved | Resolved[Member]
DeliveryRef = Unresolved | Resolved[Delivery]


class Order(BaseModel):
    """Aggregate root for a purchase.

    ``member`` and ``delivery`` are one-directional: neither Member nor Delivery
    keeps a reference back to the order, so an Order graph never contains a cycle.
    Resolving an association produces a new Order (see ``with_member``).
    """

    model_config = ConfigDict(frozen=True)

    id: int
    member: MemberRef
    delivery: DeliveryRef
    order_date: datetime
    status: OrderStatus

    @property
    def member_id(self) -> int:
        return _ref_id(self.member)

    @property
    def delivery_id(self) -> int:
        return _ref_id(self.delivery)

    def require_member(self) -> Member:
        """Return the loaded Member or raise ``UnresolvedAssociationError``."""
        if isinstance(self.member, Resolved):
            return self.member.value
        raise UnresolvedAssociationError("member", self.id, self.member.id)

    def require_delivery(self) -> Delivery:
        """Return the loaded Delivery or raise ``UnresolvedAssociationError``."""
        if isinstance(self.delivery, Resolved):
            return self.delivery.value
        raise UnresolvedAssociationError("delivery", self.id, self.delivery.id)

    def with_member(self, member: Member) -> "Order":
        return self.model_copy(update={"member": Resolved[Member](value=member)})

    def with_delivery(self, delivery: Delivery) -> "Order":
        return self.model_copy(update={"delivery": Resolved[Delivery](value=delivery)})


def _ref_id(ref: Unresolved | Resolved) -> int:
    if isinstance(ref, Resolved):
        return ref.value.id
    return ref.id


class OrderSearchCriteria(BaseModel):
    """Optional filters. A field left as ``None`` means "no filter"."""

    model_config = ConfigDict(frozen=True)

    status: OrderStatus | None = None
    member_name: str | None = None

    def matches(self, status: OrderStatus, member_name: str) -> bool:
        if self.status is not None and status != self.status:
            return False
        if self.member_name and self.member_name not in member_name:
            return False
        return True


class OrderSummary(BaseModel):
    """Flat response shape for an order. No references, nothing left to load."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    order_id: int = Field(alias="orderId")
    member_name: str = Field(alias="name")
    order_date: datetime = Field(alias="orderDate")
    status: OrderStatus = Field(alias="orderStatus")
    address: Address

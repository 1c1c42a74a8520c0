class OrderQueryError(Exception):
    """Base class for failures while reading orders."""


class UnresolvedAssociationError(OrderQueryError):
    """Raised when an order's member or delivery cannot be resolved.

    Covers both a dangling reference (the target row does not exist) and an
    association that was never loaded before it was read.
    """

    def __init__(self, association: str, order_id: int | None, target_id: int) -> None:
        self.association = association
        self.order_id = order_id
        self.target_id = target_id
        owner = f"order {order_id}" if order_id is not None else "order"
        super().__init__(f"{owner}: {association} {target_id} is not resolvable")


class StoreUnavailableError(OrderQueryError):
    """Raised when the entity store cannot be reached. Never retried here."""

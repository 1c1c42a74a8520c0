import sys
from datetime import UTC, datetime

import httpx
from loguru import logger

from src.domain.order import Address, Delivery, Member, OrderStatus
from src.entrypoints.api import OrderApi
from src.entrypoints.executor import Executor
from src.entrypoints.settings import config
from src.infrastructure.memory_store import InMemoryEntityStore


def seed_demo_store() -> InMemoryEntityStore:
    """Two members, each with two orders, so repeated members hit the identity map."""
    store = InMemoryEntityStore()
    store.add_member(Member(id=1, name="userA"))
    store.add_member(Member(id=2, name="userB"))

    addresses = [
        Address(street="1 Jongno-gu", city="Seoul", zip="03154"),
        Address(street="2 Haeundae-gu", city="Busan", zip="48094"),
        Address(street="3 Jung-gu", city="Daegu", zip="41911"),
        Address(street="4 Yuseong-gu", city="Daejeon", zip="34126"),
    ]
    for delivery_id, address in enumerate(addresses, start=1):
        store.add_delivery(Delivery(id=delivery_id, address=address))

    store.add_order(1, 1, 1, datetime(2024, 3, 1, 9, 30, tzinfo=UTC))
    store.add_order(2, 1, 2, datetime(2024, 3, 2, 14, 0, tzinfo=UTC), OrderStatus.CANCELED)
    store.add_order(3, 2, 3, datetime(2024, 3, 3, 11, 15, tzinfo=UTC))
    store.add_order(4, 2, 4, datetime(2024, 3, 4, 18, 45, tzinfo=UTC))
    return store


def main() -> None:
    logger.remove()
    logger.add(sys.stderr, level=config.LOG_LEVEL)

    api = OrderApi(
        seed_demo_store(),
        prefix=config.API_PREFIX,
        default_strategy=config.DEFAULT_STRATEGY,
    )
    # Serve the API in-process; any httpx client can talk to it.
    with httpx.Client(
        transport=httpx.MockTransport(api.handle), base_url="http://orders.local"
    ) as client:
        Executor(client, prefix=config.API_PREFIX).run()


if __name__ == "__main__":
    main()

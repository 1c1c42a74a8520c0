import httpx
from loguru import logger

from src.application.order_mapper import dump_order_entity, dump_summary
from src.application.order_service import OrderQueryService
from src.domain.errors import StoreUnavailableError, UnresolvedAssociationError
from src.domain.fetch_strategy import (
    DEFAULT_STRATEGY,
    STRATEGY_PROFILES,
    FetchStrategy,
)
from src.domain.interfaces import IEntityStore
from src.domain.order import Order, OrderSearchCriteria
from src.infrastructure.order_repository import OrderRepository


class OrderApi:
    """Routes ``GET {prefix}/<version>/simple-orders`` to a fetch strategy.

    Usable directly as an ``httpx.MockTransport`` handler. Each request gets
    its own store session; the query count is returned in ``X-Query-Count``.
    """

    RESOURCE = "simple-orders"

    def __init__(
        self,
        store: IEntityStore,
        prefix: str = "/api",
        default_strategy: FetchStrategy = DEFAULT_STRATEGY,
    ) -> None:
        if STRATEGY_PROFILES[default_strategy].returns_entities:
            raise ValueError(
                f"Default strategy {default_strategy!r} returns entities; "
                f"the unversioned route serves summaries only"
            )
        self._store = store
        prefix = prefix.rstrip("/")
        self._routes: dict[str, FetchStrategy] = {
            f"{prefix}/{profile.version}/{self.RESOURCE}": strategy
            for strategy, profile in STRATEGY_PROFILES.items()
        }
        self._routes[f"{prefix}/{self.RESOURCE}"] = default_strategy

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        strategy = self._routes.get(path)
        if strategy is None:
            return _error(404, "NotFound", f"No route for {path}")
        if request.method != "GET":
            return _error(405, "MethodNotAllowed", f"{request.method} {path}")

        logger.info(f"GET {path} -> {strategy}")
        try:
            with self._store.open_session() as session:
                service = OrderQueryService(OrderRepository(session))
                results = service.run(strategy, OrderSearchCriteria())
                query_count = session.query_count
        except UnresolvedAssociationError as exc:
            return _error(500, type(exc).__name__, str(exc))
        except StoreUnavailableError as exc:
            return _error(503, type(exc).__name__, str(exc))

        payload = [
            dump_order_entity(item) if isinstance(item, Order) else dump_summary(item)
            for item in results
        ]
        return httpx.Response(
            200,
            json=payload,
            headers={"X-Query-Count": str(query_count), "X-Fetch-Strategy": strategy},
        )


def _error(status_code: int, error: str, detail: str) -> httpx.Response:
    logger.warning(f"{status_code} {error}: {detail}")
    return httpx.Response(status_code, json={"error": error, "detail": detail})

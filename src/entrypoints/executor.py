import httpx
from loguru import logger

from src.domain.fetch_strategy import STRATEGY_PROFILES


class Executor:
    """Calls every versioned simple-orders endpoint and reports what each one cost."""

    def __init__(self, client: httpx.Client, prefix: str = "/api") -> None:
        self._client = client
        self._prefix = prefix.rstrip("/")

    def run(self) -> dict[str, list[dict]]:
        results: dict[str, list[dict]] = {}
        for strategy, profile in STRATEGY_PROFILES.items():
            url = f"{self._prefix}/{profile.version}/simple-orders"
            response = self._client.get(url)
            response.raise_for_status()

            body: list[dict] = response.json()
            results[profile.version] = body
            logger.info(
                f"{url} [{strategy}] -> {len(body)} order(s), "
                f"{response.headers.get('X-Query-Count')} query(ies)"
            )
            for item in body:
                logger.debug(f"{profile.version} | {item}")

        summaries = [
            results[p.version] for p in STRATEGY_PROFILES.values() if not p.returns_entities
        ]
        if any(s != summaries[0] for s in summaries[1:]):
            logger.warning("Summary endpoints disagree on the same data set")
        else:
            logger.info("All summary endpoints returned identical payloads")
        return results

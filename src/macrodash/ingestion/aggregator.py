"""Indicator Aggregator.

Resolves indicator keys ("fred:unemployment", "bls:cpi", "worldbank:gdp",
"bea:tradeBalance", or "<provider>:<native id>") to their adapters, runs every
adapter call concurrently and merges the results into one catalog.

Failures are isolated per indicator: a failing key (or an entire failing
provider) is omitted from the catalog and recorded in ``last_errors``. Only
when nothing at all could be fetched is NoDataAvailableError raised.

Example:
    >>> from macrodash.ingestion.aggregator import Aggregator
    >>>
    >>> aggregator = Aggregator()
    >>> catalog = aggregator.collect(["fred:unemployment", "bls:cpi", "worldbank:gdp"])
    >>> catalog["bls:cpi"].current_value
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from collections.abc import Iterable, Mapping
from datetime import datetime
from pathlib import Path

from macrodash.ingestion.adapters import ADAPTER_CLASSES, BaseAdapter
from macrodash.ingestion.schema import IndicatorRecord, Provider
from macrodash.shared.exceptions import NoDataAvailableError, UpstreamError
from macrodash.shared.utils import setup_logger

KEY_SEPARATOR = ":"


def resolve_key(key: str) -> tuple[Provider, str]:
    """Split an indicator key into (provider, series name).

    Raises:
        ValueError: If the key has no series part or names an unknown provider.
    """
    prefix, sep, name = key.partition(KEY_SEPARATOR)
    if not sep or not name:
        raise ValueError(f"Invalid indicator key '{key}', expected '<provider>:<series>'")

    for provider in Provider:
        if provider.key_prefix == prefix.lower():
            return provider, name
    known = ", ".join(p.key_prefix for p in Provider)
    raise ValueError(f"Unknown provider '{prefix}' in key '{key}' (known: {known})")


def make_key(provider: Provider, series: str) -> str:
    """Build an indicator key from a provider and series name."""
    return f"{provider.key_prefix}{KEY_SEPARATOR}{series}"


def default_keys() -> list[str]:
    """Every named series of every provider, in provider order."""
    return [
        make_key(provider, name)
        for provider, adapter_cls in ADAPTER_CLASSES.items()
        for name in adapter_cls.SERIES
    ]


class Aggregator:
    """Concurrent, failure-isolated fetcher of many indicators."""

    def __init__(
        self,
        adapters: Mapping[Provider, BaseAdapter] | None = None,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            adapters: Adapter instances per provider. Providers without an
                entry get a default-constructed adapter on first use.
            log_file: Optional path for file-based logging.
        """
        self._adapters: dict[Provider, BaseAdapter] = dict(adapters or {})
        self.logger = setup_logger(self.__class__.__name__, log_file)
        self.last_errors: dict[str, Exception] = {}

    def adapter_for(self, provider: Provider) -> BaseAdapter:
        """Return the adapter for a provider, constructing it if needed."""
        if provider not in self._adapters:
            self._adapters[provider] = ADAPTER_CLASSES[provider]()
        return self._adapters[provider]

    async def fetch_many(
        self,
        keys: Iterable[str],
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> dict[str, IndicatorRecord]:
        """Fetch all keys concurrently and return the catalog.

        Every call is started before any is awaited; the method returns once
        all of them have settled. Failed keys are left out of the catalog.

        Args:
            keys: Indicator keys; duplicates are fetched once.
            start_date: Window start passed to every adapter (adapter default if None).
            end_date: Window end passed to every adapter (default: today).

        Returns:
            Catalog mapping key → IndicatorRecord, in request order.

        Raises:
            ValueError: If any key is malformed (raised before any request).
            NoDataAvailableError: If keys were requested but none succeeded.
        """
        keys = list(dict.fromkeys(keys))
        self.last_errors = {}
        if not keys:
            return {}

        resolved = {key: resolve_key(key) for key in keys}
        adapters = {key: self.adapter_for(provider) for key, (provider, _) in resolved.items()}

        self.logger.info(
            "Fetching %d indicators from %d providers",
            len(keys),
            len({provider for provider, _ in resolved.values()}),
        )

        # One worker per key: every call is in flight at once
        loop = asyncio.get_running_loop()
        executor = ThreadPoolExecutor(max_workers=len(keys), thread_name_prefix="macrodash-fetch")
        try:
            results = await asyncio.gather(
                *(
                    loop.run_in_executor(executor, adapters[key].fetch, name, start_date, end_date)
                    for key, (_, name) in resolved.items()
                ),
                return_exceptions=True,
            )
        finally:
            executor.shutdown(wait=False)

        catalog: dict[str, IndicatorRecord] = {}
        errors: dict[str, Exception] = {}
        for key, result in zip(keys, results):
            if isinstance(result, IndicatorRecord):
                catalog[key] = result
            elif isinstance(result, UpstreamError):
                errors[key] = result
                self.logger.warning("Failed to fetch %s: %s", key, result)
            elif isinstance(result, Exception):
                errors[key] = result
                self.logger.error("Unexpected error fetching %s: %r", key, result)
            else:
                raise result

        self._log_provider_failures(resolved, errors)
        self.last_errors = errors

        self.logger.info("Successfully fetched %d/%d indicators", len(catalog), len(keys))
        if not catalog:
            raise NoDataAvailableError(keys, errors)
        return catalog

    def collect(
        self,
        keys: Iterable[str] | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> dict[str, IndicatorRecord]:
        """Blocking wrapper around fetch_many (defaults to every named series)."""
        return asyncio.run(
            self.fetch_many(keys if keys is not None else default_keys(), start_date, end_date)
        )

    def _log_provider_failures(
        self,
        resolved: dict[str, tuple[Provider, str]],
        errors: dict[str, Exception],
    ) -> None:
        by_provider: dict[Provider, list[str]] = {}
        for key, (provider, _) in resolved.items():
            by_provider.setdefault(provider, []).append(key)

        for provider, provider_keys in by_provider.items():
            if all(key in errors for key in provider_keys):
                self.logger.error(
                    "All %d %s indicators failed; omitting provider from catalog",
                    len(provider_keys),
                    provider.value,
                )

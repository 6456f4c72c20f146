"""Clean many URLs with bounded concurrency and collect statistics."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from tidy_url.models import CleaningOptions, CleaningResult
from tidy_url.url import InvalidUrlError, UrlCleaner

logger = logging.getLogger(__name__)


@dataclass
class BatchItem:
    url: str
    result: CleaningResult | None = None
    error: str | None = None

    @property
    def output(self) -> str:
        return self.result.cleaned if self.result else self.url

    @property
    def changed(self) -> bool:
        # Compared with the literal input, not the re-serialized form
        return self.result is not None and self.result.cleaned != self.url


@dataclass
class BatchReport:
    items: list[BatchItem] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.items)

    @property
    def changed(self) -> int:
        return sum(1 for i in self.items if i.changed)

    @property
    def errors(self) -> int:
        return sum(1 for i in self.items if i.error is not None)


async def clean_many(
    urls: Iterable[str],
    options: CleaningOptions | None = None,
    *,
    cleaner: UrlCleaner | None = None,
    batch_size: int = 10,
) -> BatchReport:
    """Clean ``urls`` with at most ``batch_size`` in flight. Items keep input order."""
    cleaner = cleaner or UrlCleaner()
    semaphore = asyncio.Semaphore(max(1, batch_size))

    async def _clean_one(url: str) -> BatchItem:
        async with semaphore:
            try:
                result = await cleaner.clean(url, options)
            except InvalidUrlError as e:
                logger.warning("Skipping %s", e)
                return BatchItem(url=url, error=str(e))

        item = BatchItem(url=url, result=result)
        if item.changed:
            logger.info(
                "%s -> %s (%s)", url, result.cleaned, "; ".join(result.changes) or "re-serialized"
            )
        return item

    items = await asyncio.gather(*(_clean_one(u) for u in urls))
    report = BatchReport(items=list(items))
    logger.info(
        "Processed %d URLs: %d changed, %d errors",
        report.processed, report.changed, report.errors,
    )
    return report

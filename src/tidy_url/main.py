"""Entry point: clean URLs read from files or stdin, one per line."""
from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Iterable, Iterator
from functools import partial

import httpx

from tidy_url.batch import BatchReport, clean_many
from tidy_url.config import settings
from tidy_url.probe import can_use_https
from tidy_url.tracking import load_tracking_classifier
from tidy_url.url import UrlCleaner


def _setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def read_urls(lines: Iterable[str]) -> Iterator[str]:
    """Yield URLs from text lines, skipping blanks and ``#`` comments."""
    for line in lines:
        line = line.strip()
        if line and not line.startswith("#"):
            yield line


def _load_inputs(paths: list[str]) -> list[str] | None:
    """Read URLs from ``paths`` (``-`` is stdin). None if any input is unreadable."""
    logger = logging.getLogger(__name__)
    urls: list[str] = []
    for path in paths or ["-"]:
        try:
            if path == "-":
                urls.extend(read_urls(sys.stdin))
            else:
                with open(path) as f:
                    urls.extend(read_urls(f))
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Cannot read URLs from %s: %s", "stdin" if path == "-" else path, e)
            return None
    return urls


async def _run(paths: list[str]) -> BatchReport | None:
    _setup_logging()
    logger = logging.getLogger(__name__)

    urls = _load_inputs(paths)
    if urls is None:
        return None
    logger.info("Cleaning %d URLs", len(urls))

    classifier = load_tracking_classifier(settings.tracking_rules_path)
    async with httpx.AsyncClient(headers={"User-Agent": settings.https_probe_user_agent}) as client:
        cleaner = UrlCleaner(probe=partial(can_use_https, client=client), classifier=classifier)
        report = await clean_many(
            urls,
            settings.cleaning_options(),
            cleaner=cleaner,
            batch_size=settings.batch_size,
        )

    for item in report.items:
        print(item.output)
    return report


def main(argv: list[str] | None = None) -> None:
    paths = sys.argv[1:] if argv is None else argv
    try:
        report = asyncio.run(_run(paths))
    except KeyboardInterrupt:
        sys.exit(130)
    sys.exit(1 if report is None or report.errors else 0)


if __name__ == "__main__":
    main()

from __future__ import annotations

from urllib.parse import urlparse

from prometheus_client import Counter, Histogram

SCRAPES_TOTAL = Counter(
    "gluestick_scrapes_total",
    "Total scrape runs by outcome and domain.",
    ["outcome", "domain"],
)
SCRAPE_DURATION = Histogram(
    "gluestick_scrape_duration_seconds",
    "Scrape run duration in seconds.",
    ["domain"],
)
ITEMS_MATCHED_TOTAL = Counter(
    "gluestick_items_matched_total",
    "Document nodes matched by item selectors.",
    ["domain"],
)
SCHEMA_ERRORS_TOTAL = Counter(
    "gluestick_schema_errors_total",
    "Field definitions dropped because of an unsupported shape.",
    ["kind"],
)


def record_scrape(outcome: str, url: str | None, duration_s: float | None = None) -> None:
    domain = _domain_label(url)
    SCRAPES_TOTAL.labels(outcome=outcome, domain=domain).inc()
    if duration_s is not None:
        SCRAPE_DURATION.labels(domain=domain).observe(max(duration_s, 0.0))


def record_item_match(url: str | None) -> None:
    ITEMS_MATCHED_TOTAL.labels(domain=_domain_label(url)).inc()


def record_schema_error(kind: str) -> None:
    SCHEMA_ERRORS_TOTAL.labels(kind=kind or "unknown").inc()


def _domain_label(url: str | None) -> str:
    if not url:
        return "unknown"
    host = urlparse(url).hostname
    return host.lower() if host else "unknown"

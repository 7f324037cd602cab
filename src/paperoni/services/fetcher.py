# ABOUTME: Concurrent HTML page fetcher with bounded in-flight requests.
# ABOUTME: Follows redirects manually, checks for text/html and decodes bodies as UTF-8.

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass
from urllib.parse import urljoin

import httpx
import structlog

from paperoni.config import Settings, get_settings
from paperoni.errors import HTTPError, PaperoniError, UTF8Error

log = structlog.get_logger()


@dataclass
class FetchResult:
    """Outcome for one requested URL: either the page HTML or the error that stopped it."""

    url: str
    effective_url: str | None = None
    html: str | None = None
    error: PaperoniError | None = None


def make_client(settings: Settings | None = None, **kwargs) -> httpx.AsyncClient:
    settings = settings or get_settings()
    return httpx.AsyncClient(
        timeout=settings.http_timeout,
        headers={"User-Agent": settings.user_agent},
        follow_redirects=False,
        **kwargs,
    )


def mime_essence(content_type: str | None) -> str | None:
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower() or None


async def fetch_html(
    client: httpx.AsyncClient, url: str, settings: Settings | None = None
) -> tuple[str, str]:
    """GET one page and return (effective_url, html).

    Raises HTTPError or UTF8Error. Relative redirect targets resolve against `url`.
    """
    settings = settings or get_settings()
    current = url
    for _ in range(settings.max_redirects + 1):
        try:
            response = await client.get(current)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise HTTPError(f"Request to {current} failed: {e}", url) from e

        if not response.is_redirect:
            break
        location = response.headers.get("location")
        if not location:
            raise HTTPError(f"Redirect from {current} has no Location header", url)
        current = urljoin(url, location)
        log.debug("following_redirect", url=url, location=current)
    else:
        raise HTTPError(f"Too many redirects ({settings.max_redirects}) for {url}", url)

    if not response.is_success:
        raise HTTPError(f"Request failed with status {response.status_code}", url)

    mime = mime_essence(response.headers.get("content-type"))
    if mime != "text/html":
        raise HTTPError(f"Invalid HTTP response. Received {mime or 'no content type'}", url)

    try:
        html = response.content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise UTF8Error(f"Response body of {current} is not valid UTF-8", url) from e

    log.debug("page_fetched", url=url, effective_url=current, length=len(html))
    return current, html


async def fetch_all(
    client: httpx.AsyncClient,
    urls: list[str],
    max_conn: int,
    settings: Settings | None = None,
) -> AsyncIterator[FetchResult]:
    """Fetch every URL with at most `max_conn` requests in flight.

    Results are yielded in completion order; failures are yielded, never raised.
    """
    settings = settings or get_settings()
    semaphore = asyncio.Semaphore(max_conn)

    async def fetch_one(url: str) -> FetchResult:
        async with semaphore:
            try:
                effective_url, html = await fetch_html(client, url, settings)
            except PaperoniError as e:
                e.set_article_source(url)
                log.warning("fetch_failed", url=url, error=str(e))
                return FetchResult(url=url, error=e)
        return FetchResult(url=url, effective_url=effective_url, html=html)

    for next_result in asyncio.as_completed([fetch_one(url) for url in urls]):
        yield await next_result

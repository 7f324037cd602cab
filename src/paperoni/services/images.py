# ABOUTME: Downloads an article's images into the image directory and rewrites their src.
# ABOUTME: Files are named by the MD5 of the absolute URL; failures are kept per image.

import asyncio
import hashlib
from pathlib import Path
from urllib.parse import urljoin, urlsplit

import httpx
import structlog

from paperoni.config import Settings, get_settings
from paperoni.errors import HTTPError, ImgError, StorageError
from paperoni.models import Article, ImageRef
from paperoni.services.fetcher import mime_essence

log = structlog.get_logger()


def resolve_image_url(src: str, source_url: str) -> str:
    if urlsplit(src).scheme:
        return src
    base = urlsplit(source_url)
    if src.startswith("//"):
        return f"{base.scheme}:{src}"
    if src.startswith("/"):
        return f"{base.scheme}://{base.netloc}{src}"
    return urljoin(source_url, src)


def mime_to_extension(mime: str) -> str:
    subtype = mime.split("/", 1)[-1]
    match subtype:
        case "svg+xml":
            return "svg"
        case "x-icon":
            return "ico"
        case _:
            return subtype


def image_filename(url: str, mime: str) -> str:
    digest = hashlib.md5(url.encode("utf-8"), usedforsecurity=False).hexdigest()
    return f"{digest}.{mime_to_extension(mime)}"


async def _download_image(
    client: httpx.AsyncClient,
    semaphore: asyncio.Semaphore,
    src: str,
    source_url: str,
    image_dir: Path,
) -> tuple[str, ImageRef]:
    try:
        url = resolve_image_url(src, source_url)
    except ValueError as e:
        raise ImgError(src, HTTPError(f"Invalid image URL: {e}")) from e

    async with semaphore:
        try:
            response = await client.get(url, follow_redirects=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ImgError(url, HTTPError(f"Request failed: {e}")) from e

    if not response.is_success:
        raise ImgError(url, HTTPError(f"Request failed with status {response.status_code}"))
    mime = mime_essence(response.headers.get("content-type"))
    if mime is None:
        raise ImgError(url, HTTPError("Image response has no Content-Type"))

    filename = image_filename(url, mime)
    try:
        await asyncio.to_thread((image_dir / filename).write_bytes, response.content)
    except OSError as e:
        raise ImgError(url, StorageError(f"Unable to save image: {e}")) from e

    log.debug("image_downloaded", url=url, filename=filename, mime=mime)
    return src, (filename, mime)


async def download_images(
    article: Article,
    client: httpx.AsyncClient,
    settings: Settings | None = None,
) -> Article:
    """Fetch every image of `article` and point its <img> tags at the local copies.

    The article is updated in place: image_refs lists only the stored files and
    image_errors the images that could not be fetched.
    """
    settings = settings or get_settings()
    if not article.image_refs:
        return article

    semaphore = asyncio.Semaphore(settings.image_max_conn)
    tasks = [
        _download_image(client, semaphore, src, article.source_url, settings.image_dir)
        for src, _ in article.image_refs
    ]
    results = await asyncio.gather(*tasks, return_exceptions=True)

    image_refs: list[ImageRef] = []
    image_errors: list[ImgError] = []
    for result in results:
        if isinstance(result, ImgError):
            log.warning("image_download_failed", url=result.url, error=str(result.error))
            image_errors.append(result)
            continue
        if isinstance(result, BaseException):
            raise result
        src, (filename, mime) = result
        for img in article.content_root.find_all("img", src=src):
            img["src"] = filename
            img.attrs.pop("srcset", None)
        if (filename, mime) not in image_refs:
            image_refs.append((filename, mime))

    article.image_refs = image_refs
    article.image_errors = image_errors
    if image_errors:
        log.warning(
            "images_failed",
            url=article.source_url,
            failed=len(image_errors),
            total=len(tasks),
        )
    return article

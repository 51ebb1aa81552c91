"""HTML fetching utilities with SSRF protection."""
from __future__ import annotations

import logging
import socket
import time
from dataclasses import dataclass, field
from ipaddress import ip_address
from urllib.parse import urljoin, urlparse

import requests

from src.config.settings import settings
from src.errors import FetchError

logger = logging.getLogger(__name__)

# Security limits
MAX_RESPONSE_SIZE = settings.fetcher.max_response_size


@dataclass
class FetchedPage:
    """Raw material for a DocumentModel."""
    url: str
    final_url: str
    html: str
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    was_redirected: bool = False
    robots_txt: str | None = None


def _is_url(source: str) -> bool:
    parsed = urlparse(source)
    return parsed.scheme in {"http", "https"}


def _validate_ip(ip_str: str) -> tuple[bool, str]:
    """Check if an IP address is safe (not private/internal)."""
    try:
        ip = ip_address(ip_str)
        if ip.is_private or ip.is_loopback or ip.is_reserved or ip.is_link_local or ip.is_unspecified:
            return False, f"Access to private/internal IP addresses is forbidden: {ip_str}"
        return True, ""
    except ValueError:
        return False, f"Invalid IP address: {ip_str}"


def _resolve_and_validate_url(url: str) -> tuple[str, str, str]:
    """
    Resolve URL hostname to IP and validate it's safe.
    Returns (resolved_ip, hostname, error_message).
    """
    try:
        parsed = urlparse(url)

        if parsed.scheme not in {"http", "https"}:
            return "", "", "Only http and https schemes are allowed"

        hostname = parsed.hostname
        if not hostname:
            return "", "", "Invalid URL: hostname not found"

        try:
            resolved_ip = socket.gethostbyname(hostname)
        except socket.gaierror:
            return "", "", f"Could not resolve hostname: {hostname}"

        is_safe, error_msg = _validate_ip(resolved_ip)
        if not is_safe:
            return "", "", error_msg

        return resolved_ip, hostname, ""
    except ValueError as e:
        return "", "", f"URL validation error: {e}"


def _get(url: str, timeout: int) -> requests.Response:
    """GET without automatic redirects, retrying transient network failures."""
    attempts = settings.fetcher.max_retries + 1
    for attempt in range(1, attempts + 1):
        try:
            return requests.get(
                url,
                timeout=timeout,
                allow_redirects=False,  # Redirect targets are validated one by one
                stream=True,
                headers={"User-Agent": settings.fetcher.user_agent},
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            if attempt == attempts:
                raise FetchError(
                    f"Network error fetching {url}: {exc}", url=url, reason="network"
                ) from exc
            delay = settings.fetcher.retry_backoff * (2 ** (attempt - 1))
            logger.info("Fetch attempt %d for %s failed (%s); retrying in %.1fs", attempt, url, exc, delay)
            time.sleep(delay)
    raise FetchError(f"Could not fetch {url}", url=url)


def _check_declared_size(response: requests.Response, url: str) -> None:
    content_length = response.headers.get("Content-Length")
    if content_length and int(content_length) > MAX_RESPONSE_SIZE:
        response.close()
        raise FetchError(
            f"Response too large: {int(content_length)} bytes (max {MAX_RESPONSE_SIZE})",
            url=url,
            reason="too_large",
        )


def _read_body(response: requests.Response, url: str) -> str:
    chunks = []
    total_size = 0
    for chunk in response.iter_content(chunk_size=8192, decode_unicode=False):
        total_size += len(chunk)
        if total_size > MAX_RESPONSE_SIZE:
            response.close()
            raise FetchError(
                f"Response too large: exceeded {MAX_RESPONSE_SIZE} bytes",
                url=url,
                reason="too_large",
            )
        chunks.append(chunk)

    content_bytes = b"".join(chunks)
    encoding = response.encoding or "utf-8"
    try:
        return content_bytes.decode(encoding)
    except (UnicodeDecodeError, LookupError):
        return content_bytes.decode("utf-8", errors="replace")


def fetch_page(source: str, *, include_robots: bool = True) -> FetchedPage:
    """
    Fetch a page and the context the scorers need.

    Security measures:
    - Only accepts http/https URLs (no local file paths)
    - Validates resolved IP is not private/internal (SSRF protection)
    - Disables automatic redirects to validate each redirect target
    - Limits response size to prevent memory exhaustion

    Raises:
        FetchError: for any failure; no partial page is returned
    """
    if not _is_url(source):
        raise FetchError("Only http and https URLs are allowed", url=source, reason="scheme")

    _, _, error_msg = _resolve_and_validate_url(source)
    if error_msg:
        raise FetchError(f"SSRF protection: {error_msg}", url=source, reason="ssrf")

    timeout = settings.fetcher.request_timeout
    current = source
    response = _get(current, timeout)
    _check_declared_size(response, current)

    redirect_count = 0
    while response.is_redirect and redirect_count < settings.fetcher.max_redirects:
        redirect_count += 1
        redirect_url = response.headers.get("Location", "")
        if not redirect_url:
            break

        if not _is_url(redirect_url):
            redirect_url = urljoin(current, redirect_url)

        _, _, redirect_error = _resolve_and_validate_url(redirect_url)
        if redirect_error:
            raise FetchError(
                f"SSRF protection: Redirect blocked - {redirect_error}",
                url=redirect_url,
                reason="ssrf",
            )

        logger.debug("Following redirect %d: %s -> %s", redirect_count, current, redirect_url)
        response = _get(redirect_url, timeout)
        current = redirect_url
        _check_declared_size(response, current)

    try:
        response.raise_for_status()
    except requests.HTTPError as exc:
        raise FetchError(f"HTTP error for {current}: {exc}", url=current, reason="http") from exc

    html = _read_body(response, current)
    logger.debug("Fetched %d bytes from %s", len(html), current)

    return FetchedPage(
        url=source,
        final_url=current,
        html=html,
        status_code=int(getattr(response, "status_code", 200) or 200),
        headers={str(k): str(v) for k, v in dict(response.headers).items()},
        was_redirected=redirect_count > 0,
        robots_txt=fetch_robots_txt(current) if include_robots else None,
    )


def fetch_robots_txt(url: str) -> str | None:
    """Fetch /robots.txt for the URL's origin.

    A missing or unreachable robots.txt is not an error; None is returned.
    """
    parsed = urlparse(url)
    robots_url = f"{parsed.scheme}://{parsed.netloc}/robots.txt"
    try:
        response = requests.get(
            robots_url,
            timeout=settings.fetcher.robots_timeout,
            headers={"User-Agent": settings.fetcher.user_agent},
        )
    except requests.RequestException as exc:
        logger.info("robots.txt unavailable for %s: %s", parsed.netloc, exc)
        return None
    if response.status_code != 200:
        return None
    return response.text

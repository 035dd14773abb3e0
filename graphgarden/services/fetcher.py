"""Fetching a friend's published graph document over HTTP.

Only public http(s) hosts are contacted.  Redirects are followed by hand so
each hop is checked the same way as the first request, and bodies are read in
chunks up to :data:`MAX_DOCUMENT_SIZE`.  Every failure is reported as a
:class:`FriendFetchError` naming the document URL that was requested.
"""

import ipaddress
import socket
from typing import Optional
from urllib.parse import urljoin, urlparse

import httpx

from graphgarden.errors import FriendFetchError
from graphgarden.models.graph import PROTOCOL_VERSION

DOCUMENT_PATH = ".well-known/graphgarden.json"

MAX_DOCUMENT_SIZE = 10 * 1024 * 1024
REQUEST_TIMEOUT = 30.0
MAX_HOPS = 10
USER_AGENT = f"graphgarden/{PROTOCOL_VERSION}"


def friend_document_url(base_url: str) -> str:
    """Return the URL of the graph document published under *base_url*."""
    return base_url.rstrip("/") + "/" + DOCUMENT_PATH


def _is_public_host(hostname: str) -> bool:
    try:
        infos = socket.getaddrinfo(hostname, None)
    except socket.gaierror:
        # Unresolvable hosts fail later with a connect error.
        return True

    for *_, sockaddr in infos:
        try:
            address = ipaddress.ip_address(sockaddr[0].split("%")[0])
        except ValueError:
            continue
        if not address.is_global:
            return False
    return True


def _refusal(target: str) -> Optional[str]:
    """Return why *target* must not be requested, or None when it may be."""
    parsed = urlparse(target)
    if parsed.scheme not in ("http", "https"):
        return f"unsupported scheme {parsed.scheme!r} in {target}"
    if not parsed.hostname:
        return f"no host in {target}"
    if not _is_public_host(parsed.hostname):
        return f"{parsed.hostname} is not a public host"
    return None


async def _read_body(url: str, response: httpx.Response) -> str:
    declared = response.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > MAX_DOCUMENT_SIZE:
        raise FriendFetchError(url, f"document declares {declared} bytes, limit is {MAX_DOCUMENT_SIZE}")

    body = bytearray()
    async for chunk in response.aiter_bytes():
        body += chunk
        if len(body) > MAX_DOCUMENT_SIZE:
            raise FriendFetchError(url, f"document is larger than {MAX_DOCUMENT_SIZE} bytes")
    return body.decode("utf-8", errors="replace")


async def fetch_document(url: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> str:
    """GET the graph document at *url* and return its text.

    *transport* replaces the default network transport, e.g. with an
    :class:`httpx.MockTransport`.

    Raises:
        FriendFetchError: if *url* or a redirect target is refused, the
            request fails or returns a non-2xx status, the body is too large,
            or the redirect chain is longer than :data:`MAX_HOPS`.
    """
    reason = _refusal(url)
    if reason:
        raise FriendFetchError(url, reason)

    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    target = url
    try:
        async with httpx.AsyncClient(
            headers=headers, timeout=REQUEST_TIMEOUT, follow_redirects=False, transport=transport
        ) as client:
            for _ in range(MAX_HOPS + 1):
                async with client.stream("GET", target) as response:
                    if response.is_redirect:
                        target = urljoin(target, response.headers.get("location", ""))
                        reason = _refusal(target)
                        if reason:
                            raise FriendFetchError(url, f"redirect refused: {reason}")
                        continue
                    if response.is_error:
                        raise FriendFetchError(url, f"HTTP {response.status_code} from {target}")
                    return await _read_body(url, response)
    except httpx.HTTPError as exc:
        raise FriendFetchError(url, f"{type(exc).__name__}: {exc}") from exc

    raise FriendFetchError(url, f"more than {MAX_HOPS} redirects")

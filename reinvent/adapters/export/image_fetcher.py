# reinvent/adapters/export/image_fetcher.py
import asyncio
import base64
import binascii
import ipaddress
import socket
from typing import Awaitable, Callable, List, Optional

import httpx
import structlog

from reinvent.core.ports.exporter import IImageFetcher

logger = structlog.get_logger()

MAX_REDIRECTS = 3

_BLOCKED_HOSTNAMES = {"localhost", "metadata.google.internal"}

Resolver = Callable[[str], Awaitable[List[str]]]


async def system_resolver(host: str) -> List[str]:
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    return [info[4][0] for info in infos]


def is_public_address(address: str) -> bool:
    """False for loopback, private, link-local, reserved and other non-global ranges."""
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return False
    if ip.version == 6 and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return ip.is_global and not ip.is_multicast


class HttpImageFetcher(IImageFetcher):
    """
    Resolves data: URIs locally and downloads http(s) URLs with httpx.

    Downloads are limited to public hosts: every hop of a redirect chain is
    checked before it is requested, and the body is streamed so reading stops
    as soon as it passes `max_bytes`.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        max_bytes: int = 20 * 1024 * 1024,
        resolver: Resolver = system_resolver,
    ):
        self.client = client
        self.max_bytes = max_bytes
        self.resolver = resolver

    async def fetch(self, reference: str) -> Optional[bytes]:
        if reference.startswith("data:"):
            return self._decode_data_uri(reference)

        if not reference.startswith(("http://", "https://")):
            logger.warning("image_reference_unsupported", reference=reference[:60])
            return None

        try:
            url = httpx.URL(reference)
        except httpx.InvalidURL as e:
            logger.warning("image_reference_unsupported", reference=reference[:60], error=str(e))
            return None

        for _ in range(MAX_REDIRECTS + 1):
            if url.scheme not in ("http", "https") or not await self._is_public_host(url.host):
                logger.warning("image_fetch_blocked", url=str(url)[:120])
                return None

            try:
                async with self.client.stream("GET", url, follow_redirects=False) as response:
                    if response.is_redirect:
                        url = response.url.join(response.headers["location"])
                        continue
                    if response.is_error:
                        logger.warning("image_fetch_failed", url=str(url)[:120], status=response.status_code)
                        return None
                    return await self._read_capped(response)
            except (httpx.TransportError, httpx.InvalidURL) as e:
                logger.warning("image_fetch_failed", url=str(url)[:120], error=f"{type(e).__name__}: {e}")
                return None

        logger.warning("image_fetch_too_many_redirects", url=reference[:120])
        return None

    async def _is_public_host(self, host: str) -> bool:
        host = host.rstrip(".").lower()
        if not host or host in _BLOCKED_HOSTNAMES or host.endswith(".localhost"):
            return False

        try:
            ipaddress.ip_address(host)
            addresses = [host]
        except ValueError:
            try:
                addresses = await self.resolver(host)
            except OSError as e:
                logger.warning("image_host_unresolved", host=host, error=str(e))
                return False

        return bool(addresses) and all(is_public_address(a) for a in addresses)

    async def _read_capped(self, response: httpx.Response) -> Optional[bytes]:
        declared = response.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_bytes:
            logger.warning("image_fetch_too_large", url=str(response.url)[:120], size=int(declared))
            return None

        body = bytearray()
        async for chunk in response.aiter_bytes():
            body.extend(chunk)
            if len(body) > self.max_bytes:
                logger.warning("image_fetch_too_large", url=str(response.url)[:120], size=len(body))
                return None
        return bytes(body)

    @staticmethod
    def _decode_data_uri(reference: str) -> Optional[bytes]:
        header, _, payload = reference.partition(",")
        if not payload or ";base64" not in header:
            logger.warning("image_data_uri_invalid", header=header[:60])
            return None
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            logger.warning("image_data_uri_invalid", header=header[:60], error=str(e))
            return None

r"""Unit tests for transport selection and httpx client construction."""

from __future__ import annotations

import ssl

import httpx
import pytest

from waterfalls_client.config import ClientConfig, TlsBackend
from waterfalls_client.transport import (
    TransportMode,
    build_verify,
    create_async_client,
    create_client,
    resolve_transport,
)

########################################
#     Tests for resolve_transport      #
########################################


def test_resolve_transport_plaintext() -> None:
    config = ClientConfig(base_url="http://localhost:3000")
    assert resolve_transport(config) is TransportMode.DIRECT_PLAINTEXT


def test_resolve_transport_tls() -> None:
    config = ClientConfig(base_url="https://waterfalls.example.com")
    assert resolve_transport(config) is TransportMode.DIRECT_TLS


@pytest.mark.parametrize(
    "base_url", ["https://waterfalls.example.com", "http://abcdefghijklmnop.onion"]
)
def test_resolve_transport_proxied(base_url: str) -> None:
    config = ClientConfig(base_url=base_url, proxy="socks5h://127.0.0.1:9050")
    assert resolve_transport(config) is TransportMode.PROXIED


###################################
#     Tests for build_verify      #
###################################


def test_build_verify_default_backend() -> None:
    assert build_verify(ClientConfig(base_url="https://waterfalls.example.com")) is True


def test_build_verify_system_backend() -> None:
    config = ClientConfig(base_url="https://waterfalls.example.com", tls_backend=TlsBackend.SYSTEM)
    verify = build_verify(config)
    assert isinstance(verify, ssl.SSLContext)
    assert verify.verify_mode == ssl.CERT_REQUIRED


def test_build_verify_accept_invalid_certs() -> None:
    config = ClientConfig(
        base_url="https://waterfalls.example.com",
        ca_bundle="/does/not/matter.pem",
        accept_invalid_certs=True,
    )
    assert build_verify(config) is False


def test_build_verify_missing_ca_bundle() -> None:
    config = ClientConfig(
        base_url="https://waterfalls.example.com", ca_bundle="/does/not/exist.pem"
    )
    with pytest.raises(ValueError, match=r"cannot load CA bundle"):
        build_verify(config)


####################################
#     Tests for create_client      #
####################################


def test_create_client() -> None:
    config = ClientConfig(
        base_url="https://waterfalls.example.com", timeout=3.5, headers=(("User-Agent", "w/1"),)
    )
    with create_client(config) as client:
        assert isinstance(client, httpx.Client)
        assert client.timeout == httpx.Timeout(3.5)
        assert client.headers["User-Agent"] == "w/1"


def test_create_client_with_socks_proxy() -> None:
    config = ClientConfig(
        base_url="http://abcdefghijklmnop.onion", proxy="socks5h://127.0.0.1:9050"
    )
    with create_client(config) as client:
        assert isinstance(client, httpx.Client)


def test_create_client_with_http_proxy() -> None:
    config = ClientConfig(
        base_url="https://waterfalls.example.com", proxy="http://proxy.local:8080"
    )
    with create_client(config) as client:
        assert isinstance(client, httpx.Client)


def test_create_client_timeout_bounds_each_phase() -> None:
    config = ClientConfig(base_url="https://waterfalls.example.com", timeout=4.0)
    with create_client(config) as client:
        assert client.timeout.connect == 4.0
        assert client.timeout.read == 4.0
        assert client.timeout.write == 4.0
        assert client.timeout.pool == 4.0


@pytest.mark.asyncio
async def test_create_async_client() -> None:
    config = ClientConfig(
        base_url="https://waterfalls.example.com", timeout=2.0, proxy="socks5://127.0.0.1:9050"
    )
    async with create_async_client(config) as client:
        assert isinstance(client, httpx.AsyncClient)
        assert client.timeout == httpx.Timeout(2.0)


@pytest.mark.asyncio
async def test_create_async_client_timeout_bounds_each_phase() -> None:
    config = ClientConfig(base_url="https://waterfalls.example.com", timeout=4.0)
    async with create_async_client(config) as client:
        assert client.timeout.connect == 4.0
        assert client.timeout.read == 4.0
        assert client.timeout.write == 4.0
        assert client.timeout.pool == 4.0

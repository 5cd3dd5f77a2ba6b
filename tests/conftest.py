"""
Shared fixtures: a fake dnspython resolver and counting httpx transports.
"""

from unittest.mock import MagicMock

import httpx
import pytest

from captivedetect.core.config import DetectionConfig
from captivedetect.probes.http import CaptiveProbe
from captivedetect.resolvers.txt import TxtSignalResolver


class FakeRdata:
    def __init__(self, *chunks: bytes):
        self.strings = chunks


class FakeAnswer:
    """Mimics dns.resolver.Answer: truthy rrset, iterable rdatas."""

    def __init__(self, records):
        self._rdatas = [FakeRdata(*(r if isinstance(r, tuple) else (r,)))
                        for r in records]
        self.rrset = self._rdatas or None

    def __iter__(self):
        return iter(self._rdatas)


def make_dns(records=None, error=None) -> MagicMock:
    """Resolver mock: TXT answer built from *records* (bytes) or raising *error*."""
    resolver = MagicMock()
    if error is not None:
        resolver.resolve.side_effect = error
    else:
        resolver.resolve.return_value = FakeAnswer(records or [])
    return resolver


class CountingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler):
        self.requests = []

        def _wrapped(request):
            self.requests.append(request)
            return handler(request)

        super().__init__(_wrapped)


def _respond(status=200, body="", location=None):
    headers = {"location": location} if location else {}

    def handler(request):
        return httpx.Response(status, headers=headers, text=body)

    return handler


@pytest.fixture
def respond():
    """Factory for handlers returning a canned status, body and Location."""
    return _respond


@pytest.fixture
def config():
    return DetectionConfig(allowed_hosts=("portal.example.net",))


@pytest.fixture
def make_probe(config):
    """Build (probe, transport) for a given request handler."""
    probes = []

    def _make(handler, cfg=None):
        transport = CountingTransport(handler)
        client = httpx.Client(transport=transport)
        probe = CaptiveProbe(cfg or config, client=client)
        probes.append(client)
        return probe, transport

    yield _make
    for client in probes:
        client.close()


@pytest.fixture
def make_resolver(config):
    def _make(records=None, error=None, cfg=None):
        return TxtSignalResolver(cfg or config, resolver=make_dns(records, error))

    return _make

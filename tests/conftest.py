"""Shared fixtures for portal client tests."""

from typing import Callable, List

import httpx
import pytest

from portal_client import ClientConfig, ClientMetrics, PortalClient


class RecordingHandler:
    """MockTransport handler that records requests and replays outcomes in order."""

    def __init__(self, outcomes: List):
        self.outcomes = list(outcomes)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def metrics() -> ClientMetrics:
    return ClientMetrics()


@pytest.fixture
def make_client(metrics) -> Callable[..., PortalClient]:
    """Build a PortalClient on top of an httpx.MockTransport handler."""

    def _make(handler, **config_overrides) -> PortalClient:
        config_overrides.setdefault("base_url", "https://portal.example.com/api")
        config_overrides.setdefault("retry_delay_ms", 0)
        config = ClientConfig(**config_overrides)
        return PortalClient(config, transport=httpx.MockTransport(handler), metrics=metrics)

    return _make

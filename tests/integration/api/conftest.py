"""Per-user authorization headers for the API integration tests."""

from collections.abc import Callable

import pytest

from infrastructure.auth.provider import TokenUser
from tests.conftest import ALICE, BOB, OWNER

HeadersFor = Callable[[TokenUser], dict[str, str]]


@pytest.fixture
def owner_headers(headers_for: HeadersFor) -> dict[str, str]:
    return headers_for(OWNER)


@pytest.fixture
def alice_headers(headers_for: HeadersFor) -> dict[str, str]:
    return headers_for(ALICE)


@pytest.fixture
def bob_headers(headers_for: HeadersFor) -> dict[str, str]:
    return headers_for(BOB)

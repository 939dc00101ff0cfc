"""
Pytest configuration for gradelink tests.
"""

from typing import Callable, Optional

import httpx
import pytest

from gradelink.integration.extensions.outcome_data import OutcomeDataToolProvider
from gradelink.integration.transport import OutcomeTransport
from tests.helpers import (
    CONSUMER_KEY,
    CONSUMER_SECRET,
    SERVICE_URL,
    SOURCEDID,
    StubOutcomeService,
)

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def stub_service() -> StubOutcomeService:
    return StubOutcomeService()


@pytest.fixture
def launch_params() -> dict:
    return {
        "lis_outcome_service_url": SERVICE_URL,
        "lis_result_sourcedid": SOURCEDID,
        "user_id": "student-7",
        "ext_outcome_data_values_accepted": "text,url",
    }


@pytest.fixture
def make_transport() -> Callable[[Handler], OutcomeTransport]:
    def factory(handler: Handler) -> OutcomeTransport:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        return OutcomeTransport(CONSUMER_KEY, CONSUMER_SECRET, client=client)
    return factory


@pytest.fixture
def make_provider(launch_params, make_transport) -> Callable[..., OutcomeDataToolProvider]:
    """Provider launched with a given advertisement and wired to ``handler``."""
    def factory(
        handler: Optional[Handler] = None,
        advertisement: Optional[str] = "text,url",
    ) -> OutcomeDataToolProvider:
        params = dict(launch_params)
        if advertisement is None:
            params.pop("ext_outcome_data_values_accepted")
        else:
            params["ext_outcome_data_values_accepted"] = advertisement
        transport = make_transport(handler or StubOutcomeService())
        return OutcomeDataToolProvider(CONSUMER_KEY, CONSUMER_SECRET, params, transport=transport)
    return factory

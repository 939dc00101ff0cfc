"""Test helpers: launch constants and a stub outcome service."""

from typing import List

import httpx

from gradelink.integration.extensions.outcome_data import OutcomeDataToolConsumer
from gradelink.integration.outcome_response import OutcomeResponse


SERVICE_URL = "https://lms.example.edu/api/lti/v1/outcomes"
SOURCEDID = "course-42:student-7:assignment-3"
CONSUMER_KEY = "key-123"
CONSUMER_SECRET = "secret-456"


class StubOutcomeService:
    """
    In-memory tool consumer answering outcome posts.

    Every received request is parsed with the outcome data consumer so tests
    can assert on what went over the wire.
    """

    def __init__(self, code_major: str = "success", status_code: int = 200):
        self.code_major = code_major
        self.status_code = status_code
        self.consumer = OutcomeDataToolConsumer(CONSUMER_KEY, CONSUMER_SECRET)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome_request = self.consumer.process_outcome_request(request.content)
        reply = OutcomeResponse(
            code_major=self.code_major,
            severity="status",
            description="stubbed",
            message_ref_identifier=outcome_request.message_identifier,
            operation=outcome_request.operation,
            score="0.5" if outcome_request.is_read_request() else None,
        )
        return httpx.Response(self.status_code, content=reply.generate_response_xml())

    @property
    def last_body(self) -> bytes:
        return self.requests[-1].content

"""
LTI 1.1 tool provider: the launch a tool received and the outcome service it
reports to.

Copyright (c) 2025 Chronos Algorithmic Observatory
Licensed under MIT License
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional, Tuple

import httpx

from gradelink.integration.extensions.base import ExtensionFactory, ExtensionRegistry
from gradelink.integration.launch import LaunchParams
from gradelink.integration.outcome_request import OutcomeRequest, Score
from gradelink.integration.outcome_response import OutcomeResponse
from gradelink.integration.transport import OutcomeTransport

if TYPE_CHECKING:
    from gradelink.config import OutcomeServiceSettings


logger = logging.getLogger(__name__)


class ToolProvider(LaunchParams):
    """
    Tool-side handle on a single launch.

    Extensions registered here are instantiated afresh for every request
    created by ``new_request``, so the provider itself holds no per-request
    state.
    """

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        params: Optional[Mapping[str, Any]] = None,
        transport: Optional[OutcomeTransport] = None,
    ):
        super().__init__(params)
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.transport = transport
        self.extension_registry = ExtensionRegistry()

    @classmethod
    def from_settings(
        cls,
        settings: OutcomeServiceSettings,
        params: Optional[Mapping[str, Any]] = None,
        client: Optional[httpx.Client] = None,
    ) -> ToolProvider:
        """
        Create a provider whose credentials and transport come from settings.

        Args:
            settings: Outcome service settings
            params: Launch parameters received from the tool consumer
            client: Optional preconfigured httpx client

        Returns:
            Configured provider
        """
        return cls(
            settings.consumer_key,
            settings.consumer_secret.get_secret_value(),
            params,
            transport=OutcomeTransport.from_settings(settings, client=client),
        )

    def register_extensions(self, factories: Iterable[ExtensionFactory]) -> Tuple[ExtensionFactory, ...]:
        """
        Register outcome request extensions.

        Returns:
            The full registration order used for every later request
        """
        return self.extension_registry.register(factories)

    @property
    def outcome_request_extensions(self) -> Tuple[ExtensionFactory, ...]:
        return self.extension_registry.factories

    def is_outcome_service(self) -> bool:
        """Whether the launch supplied what is needed to report outcomes."""
        return bool(self.lis_outcome_service_url and self.lis_result_sourcedid)

    def new_request(self) -> OutcomeRequest:
        return OutcomeRequest(
            lis_outcome_service_url=self.lis_outcome_service_url,
            lis_result_sourcedid=self.lis_result_sourcedid,
            consumer_key=self.consumer_key,
            consumer_secret=self.consumer_secret,
            extensions=self.extension_registry.new_chain(),
            transport=self.transport,
        )

    def post_replace_result(self, score: Optional[Score]) -> OutcomeResponse:
        """
        POST the given score to the tool consumer with a replaceResult.

        Args:
            score: Score in [0.0, 1.0]

        Returns:
            OutcomeResponse from the tool consumer
        """
        return self.new_request().post_replace_result(score)

    def post_delete_result(self) -> OutcomeResponse:
        return self.new_request().post_delete_result()

    def post_read_result(self) -> OutcomeResponse:
        return self.new_request().post_read_result()

    def close(self) -> None:
        """Release the transport's HTTP client if the transport owns it."""
        if self.transport is not None:
            self.transport.close()

    def __enter__(self) -> ToolProvider:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["ToolProvider"]

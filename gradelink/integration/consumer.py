"""
LTI 1.1 tool consumer: configures launches and answers outcome requests.

Copyright (c) 2025 Chronos Algorithmic Observatory
Licensed under MIT License
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from gradelink.integration.extensions.base import ExtensionFactory, ExtensionRegistry
from gradelink.integration.launch import LaunchParams
from gradelink.integration.outcome_request import OutcomeRequest


logger = logging.getLogger(__name__)


class ToolConsumer(LaunchParams):
    """Platform-side launch configuration plus outcome request handling."""

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        params: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(params)
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.extension_registry = ExtensionRegistry()

    def register_extensions(self, factories: Iterable[ExtensionFactory]) -> Tuple[ExtensionFactory, ...]:
        return self.extension_registry.register(factories)

    @property
    def outcome_request_extensions(self) -> Tuple[ExtensionFactory, ...]:
        return self.extension_registry.factories

    def process_outcome_request(self, xml: Union[str, bytes]) -> OutcomeRequest:
        """
        Read an outcome request posted by a tool.

        Args:
            xml: Raw request body

        Returns:
            OutcomeRequest with every registered extension's fields extracted
        """
        request = OutcomeRequest.from_post_request(xml, self.extension_registry.new_chain())
        logger.debug("Received %s for sourcedid %s", request.operation, request.lis_result_sourcedid)
        return request


__all__ = ["ToolConsumer"]

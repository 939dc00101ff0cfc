"""
LTI 1.1 Basic Outcomes integration.

Copyright (c) 2025 Chronos Algorithmic Observatory
Licensed under MIT License
"""

from gradelink.integration.errors import (
    LTIConfigurationError,
    LTIError,
    OutcomeError,
    OutcomeTransportError,
    ValidationError,
)
from gradelink.integration.launch import LaunchParams
from gradelink.integration.outcome_response import OutcomeResponse, OutcomeStatus
from gradelink.integration.extensions.base import (
    ExtensionChain,
    ExtensionFactory,
    ExtensionRegistry,
    OutcomeRequestExtension,
)
from gradelink.integration.outcome_request import OutcomeRequest
from gradelink.integration.transport import OAuthSigner, OutcomeTransport
from gradelink.integration.provider import ToolProvider
from gradelink.integration.consumer import ToolConsumer
from gradelink.integration.extensions.capabilities import (
    OUTCOME_DATA_TYPES,
    AcceptedOutcomeTypes,
)
from gradelink.integration.extensions.outcome_data import (
    OutcomeDataToolConsumer,
    OutcomeDataToolProvider,
    ResultData,
    ResultDataExtension,
)

__all__ = [
    "LTIError",
    "LTIConfigurationError",
    "OutcomeError",
    "OutcomeTransportError",
    "ValidationError",
    "LaunchParams",
    "OutcomeResponse",
    "OutcomeStatus",
    "ExtensionChain",
    "ExtensionFactory",
    "ExtensionRegistry",
    "OutcomeRequestExtension",
    "OutcomeRequest",
    "OAuthSigner",
    "OutcomeTransport",
    "ToolProvider",
    "ToolConsumer",
    "OUTCOME_DATA_TYPES",
    "AcceptedOutcomeTypes",
    "OutcomeDataToolConsumer",
    "OutcomeDataToolProvider",
    "ResultData",
    "ResultDataExtension",
]

"""
Outcome data capability advertisement.

A tool consumer lists the kinds of result data it accepts in the launch
parameter ``ext_outcome_data_values_accepted`` as a comma-joined string. Token
spelling is never validated: unknown tokens pass through untouched.

Copyright (c) 2025 Chronos Algorithmic Observatory
Licensed under MIT License
"""

from __future__ import annotations

from functools import cached_property
from typing import Final, Iterable, List, Optional, Tuple, Union

from gradelink.integration.launch import LaunchParams


OUTCOME_DATA_VALUES_ACCEPTED: Final[str] = "outcome_data_values_accepted"

OUTCOME_TEXT: Final[str] = "text"
OUTCOME_URL: Final[str] = "url"
OUTCOME_NEEDS_GRADING: Final[str] = "needs_grading"
OUTCOME_DATE: Final[str] = "date"
OUTCOME_STATUS_OF_RESULT: Final[str] = "status_of_result"

OUTCOME_DATA_TYPES: Final[Tuple[str, ...]] = (
    OUTCOME_TEXT,
    OUTCOME_URL,
    OUTCOME_NEEDS_GRADING,
    OUTCOME_DATE,
    OUTCOME_STATUS_OF_RESULT,
)


def encode_outcome_types(values: Union[str, Iterable[str]]) -> str:
    """Join tokens with commas; a string is taken as already encoded."""
    if isinstance(values, str):
        return values
    return ",".join(values)


def decode_outcome_types(advertisement: Optional[str]) -> List[str]:
    """Split an advertisement on commas, keeping order and duplicates."""
    if not advertisement:
        return []
    return advertisement.split(",")


class AcceptedOutcomeTypes:
    """
    Provider-side view of one consumer's advertisement.

    The advertisement is parsed at most once; every query afterwards is a pure
    lookup against the cached token list.
    """

    def __init__(self, advertisement: Optional[str]):
        self.advertisement = advertisement

    @classmethod
    def from_launch(cls, launch: LaunchParams) -> AcceptedOutcomeTypes:
        return cls(launch.get_ext_param(OUTCOME_DATA_VALUES_ACCEPTED))

    @cached_property
    def types(self) -> Tuple[str, ...]:
        return tuple(decode_outcome_types(self.advertisement))

    @property
    def advertised(self) -> bool:
        """
        Whether the consumer is aware of the outcome data extension at all.

        Presence of the parameter is what counts, even when its value holds
        no token this library knows.
        """
        return self.advertisement is not None

    def supports(self, token: str) -> bool:
        return token in self.types


__all__ = [
    "OUTCOME_DATA_VALUES_ACCEPTED",
    "OUTCOME_TEXT",
    "OUTCOME_URL",
    "OUTCOME_NEEDS_GRADING",
    "OUTCOME_DATE",
    "OUTCOME_STATUS_OF_RESULT",
    "OUTCOME_DATA_TYPES",
    "encode_outcome_types",
    "decode_outcome_types",
    "AcceptedOutcomeTypes",
]

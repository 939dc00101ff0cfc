"""
Outcome data extension: report result data alongside the score.

A tool launched as an outcome service can send free text (plain or CDATA), a
URL, a needs-grading flag, a status marker and a date with its score, provided
the consumer advertised support for them::

    provider = OutcomeDataToolProvider(consumer_key, consumer_secret, params)

    if provider.accepts_outcome_text():
        response = provider.post_replace_result_with_data(score, {"text": "submission text"})
    else:
        response = provider.post_replace_result(score)

    if response.is_success():
        ...
    elif response.is_processing():
        ...
    elif response.is_unsupported():
        ...

``needs_grading`` marks the submission as waiting for an instructor ("true") or
as graded ("false"); combined with ``url`` it points the grader at the
student's work.

Text sent as CDATA comes back from a parse as plain ``text``: the CDATA
distinction is not recoverable from the wire.

Copyright (c) 2025 Chronos Algorithmic Observatory
Licensed under MIT License
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any, Final, List, Mapping, Optional, Tuple, Union
from xml.dom import minidom

from gradelink.integration import pox
from gradelink.integration.consumer import ToolConsumer
from gradelink.integration.extensions.capabilities import (
    OUTCOME_DATA_TYPES,
    OUTCOME_DATA_VALUES_ACCEPTED,
    OUTCOME_DATE,
    OUTCOME_NEEDS_GRADING,
    OUTCOME_STATUS_OF_RESULT,
    OUTCOME_TEXT,
    OUTCOME_URL,
    AcceptedOutcomeTypes,
    encode_outcome_types,
)
from gradelink.integration.outcome_request import Score
from gradelink.integration.outcome_response import OutcomeResponse
from gradelink.integration.provider import ToolProvider

if TYPE_CHECKING:
    from gradelink.config import OutcomeServiceSettings


logger = logging.getLogger(__name__)

RESULT_DATA_PATH: Final[str] = "resultRecord/result/resultData"

# Keys accepted by ``post_replace_result_with_data``, mapped to ResultData fields.
RESULT_DATA_KEYS: Final[Tuple[Tuple[str, str], ...]] = (
    ("text", "text"),
    ("cdata_text", "cdata_text"),
    ("url", "url"),
    ("needs_grading", "needs_grading"),
    ("date", "date"),
    ("statusofResult", "status_of_result"),
)

NeedsGrading = Union[bool, str]


def format_needs_grading(value: NeedsGrading) -> str:
    """Render the needs-grading flag as its wire literal."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass
class ResultData:
    """
    Optional result data for one outcome request.

    A field counts as set when it is not None. ``cdata_text`` takes priority
    over ``text`` when both are set.
    """

    text: Optional[str] = None
    cdata_text: Optional[str] = None
    url: Optional[str] = None
    needs_grading: Optional[NeedsGrading] = None
    status_of_result: Optional[str] = None
    date: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> ResultData:
        """
        Build result data from the untyped convenience mapping.

        Unknown keys are ignored; ``text`` is dropped when ``cdata_text`` is
        present.
        """
        values = {}
        for key, field_name in RESULT_DATA_KEYS:
            if data and data.get(key) is not None:
                values[field_name] = data[key]
        if "cdata_text" in values:
            values.pop("text", None)
        return cls(**values)

    def has_data(self) -> bool:
        return any(getattr(self, f.name) is not None for f in fields(self))


class ResultDataExtension:
    """
    Outcome request extension carrying ``resultData``.

    Writes ``text`` (CDATA or escaped), ``url``, ``needs_grading``,
    ``status_of_result`` and ``date`` in that order, skipping unset fields,
    and reads the same elements back from an inbound request.
    """

    def __init__(self, data: Optional[ResultData] = None):
        self.data = data if data is not None else ResultData()

    def has_result_data(self) -> bool:
        return self.data.has_data()

    def contribute_result_values(self, node: minidom.Element) -> None:
        if not self.has_result_data():
            return

        data = self.data
        result_data = pox.find_or_append_element(node, "resultData")

        if data.cdata_text is not None:
            pox.append_cdata_element(result_data, OUTCOME_TEXT, data.cdata_text)
        elif data.text is not None:
            pox.append_element(result_data, OUTCOME_TEXT, data.text)

        if data.url is not None:
            pox.append_element(result_data, OUTCOME_URL, data.url)
        if data.needs_grading is not None:
            pox.append_element(result_data, OUTCOME_NEEDS_GRADING,
                               format_needs_grading(data.needs_grading))
        if data.status_of_result is not None:
            pox.append_element(result_data, OUTCOME_STATUS_OF_RESULT, data.status_of_result)
        if data.date is not None:
            pox.append_element(result_data, OUTCOME_DATE, data.date)

    def extract_fields(self, document: ET.Element) -> None:
        self.data = ResultData(
            text=pox.get_text(document, f"{RESULT_DATA_PATH}/{OUTCOME_TEXT}"),
            url=pox.get_text(document, f"{RESULT_DATA_PATH}/{OUTCOME_URL}"),
            needs_grading=pox.get_text(document, f"{RESULT_DATA_PATH}/{OUTCOME_NEEDS_GRADING}"),
            date=pox.get_text(document, f"{RESULT_DATA_PATH}/{OUTCOME_DATE}"),
            status_of_result=pox.get_text(document, f"{RESULT_DATA_PATH}/{OUTCOME_STATUS_OF_RESULT}"),
        )


class OutcomeDataToolProvider(ToolProvider):
    """Tool provider with the outcome data extension registered."""

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.register_extensions([ResultDataExtension])
        self._accepted_outcome_types: Optional[AcceptedOutcomeTypes] = None

    @property
    def outcome_types(self) -> AcceptedOutcomeTypes:
        if self._accepted_outcome_types is None:
            self._accepted_outcome_types = AcceptedOutcomeTypes.from_launch(self)
        return self._accepted_outcome_types

    def accepted_outcome_types(self) -> List[str]:
        """The outcome data types the consumer advertised, in order."""
        return list(self.outcome_types.types)

    def accepts_outcome_data(self) -> bool:
        """Whether the consumer advertised the outcome data extension at all."""
        return self.outcome_types.advertised

    def supports_outcome_type(self, token: str) -> bool:
        return self.outcome_types.supports(token)

    def accepts_outcome_text(self) -> bool:
        return self.supports_outcome_type(OUTCOME_TEXT)

    def accepts_outcome_url(self) -> bool:
        return self.supports_outcome_type(OUTCOME_URL)

    def accepts_outcome_needs_grading(self) -> bool:
        return self.supports_outcome_type(OUTCOME_NEEDS_GRADING)

    def accepts_outcome_date(self) -> bool:
        return self.supports_outcome_type(OUTCOME_DATE)

    def accepts_outcome_status_of_result(self) -> bool:
        return self.supports_outcome_type(OUTCOME_STATUS_OF_RESULT)

    def post_replace_result_with_data(
        self,
        score: Optional[Score],
        data: Optional[Mapping[str, Any]] = None,
    ) -> OutcomeResponse:
        """
        POST a replaceResult carrying the score and result data.

        The mapping may hold ``text``, ``cdata_text``, ``url``,
        ``needs_grading``, ``date`` and ``statusofResult``; if both
        ``cdata_text`` and ``text`` are given, ``cdata_text`` is used. The
        consumer's advertisement is not consulted here.

        Args:
            score: Score in [0.0, 1.0]
            data: Result data keyed as above

        Returns:
            OutcomeResponse from the tool consumer
        """
        request = self.new_request()
        extension = request.get_extension(ResultDataExtension)
        extension.data = ResultData.from_mapping(data)
        return request.post_replace_result(score)


class OutcomeDataToolConsumer(ToolConsumer):
    """Tool consumer that advertises and reads outcome data."""

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.register_extensions([ResultDataExtension])

    @classmethod
    def from_settings(
        cls,
        settings: OutcomeServiceSettings,
        params: Optional[Mapping[str, Any]] = None,
    ) -> OutcomeDataToolConsumer:
        """
        Create a consumer advertising the outcome data types from settings.

        Args:
            settings: Outcome service settings
            params: Launch parameters to start from

        Returns:
            Consumer whose launch carries ``ext_outcome_data_values_accepted``
        """
        consumer = cls(
            settings.consumer_key,
            settings.consumer_secret.get_secret_value(),
            params,
        )
        consumer.outcome_data_values_accepted = settings.outcome_data_values_accepted
        return consumer

    @property
    def outcome_data_values_accepted(self) -> Optional[str]:
        """Comma-separated outcome data types this consumer accepts."""
        return self.get_ext_param(OUTCOME_DATA_VALUES_ACCEPTED)

    @outcome_data_values_accepted.setter
    def outcome_data_values_accepted(self, values: Union[str, List[str], Tuple[str, ...]]) -> None:
        self.set_ext_param(OUTCOME_DATA_VALUES_ACCEPTED, encode_outcome_types(values))

    def support_outcome_data(self) -> None:
        """Advertise every outcome data type this library knows."""
        self.outcome_data_values_accepted = OUTCOME_DATA_TYPES


__all__ = [
    "RESULT_DATA_KEYS",
    "ResultData",
    "ResultDataExtension",
    "OutcomeDataToolProvider",
    "OutcomeDataToolConsumer",
    "format_needs_grading",
]

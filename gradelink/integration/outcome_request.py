"""
LTI Basic Outcomes request: the document assembler for score reports.

The request serializes the score itself and delegates every optional part of
the ``result`` element to its extension chain. The same chain is offered the
parsed document when a consumer reads an inbound request.

Copyright (c) 2025 Chronos Algorithmic Observatory
Licensed under MIT License
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from decimal import Decimal
from typing import Optional, Type, TypeVar, Union
from xml.dom import minidom

from gradelink.integration import pox
from gradelink.integration.errors import LTIConfigurationError, ValidationError
from gradelink.integration.extensions.base import ExtensionChain
from gradelink.integration.outcome_response import OutcomeResponse
from gradelink.integration.transport import OutcomeTransport


logger = logging.getLogger(__name__)

X = TypeVar('X')

Score = Union[float, int, str]


def format_score(score: Score) -> str:
    """Render a score as a plain decimal string, never in exponent notation."""
    if isinstance(score, float):
        return format(Decimal(repr(score)), "f")
    return str(score)


class OutcomeRequest:
    """
    A single outcome report against one result sourcedid.

    Providers obtain instances from ``ToolProvider.new_request`` so the
    registered extension chain and transport are already wired in.
    """

    def __init__(
        self,
        lis_outcome_service_url: Optional[str] = None,
        lis_result_sourcedid: Optional[str] = None,
        consumer_key: Optional[str] = None,
        consumer_secret: Optional[str] = None,
        extensions: Optional[ExtensionChain] = None,
        transport: Optional[OutcomeTransport] = None,
    ):
        self.lis_outcome_service_url = lis_outcome_service_url
        self.lis_result_sourcedid = lis_result_sourcedid
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.extensions = extensions if extensions is not None else ExtensionChain()
        self.transport = transport

        self.operation: Optional[str] = None
        self.score: Optional[Score] = None
        self.message_identifier: Optional[str] = None
        self.outcome_response: Optional[OutcomeResponse] = None

    @classmethod
    def from_post_request(
        cls,
        xml: Union[str, bytes],
        extensions: Optional[ExtensionChain] = None,
    ) -> OutcomeRequest:
        """
        Read an inbound outcome request, as received by a tool consumer.

        Args:
            xml: Raw request body
            extensions: Chain whose links extract their own fields

        Returns:
            OutcomeRequest with operation, sourcedid, score and extension
            fields populated
        """
        request = cls(extensions=extensions)
        request.process_xml(xml)
        return request

    def get_extension(self, kind: Type[X]) -> Optional[X]:
        """Return this request's extension instance of type ``kind``."""
        return self.extensions.find(kind)

    def post_replace_result(self, score: Optional[Score]) -> OutcomeResponse:
        """
        POST a replaceResult with the given score.

        Args:
            score: Score in [0.0, 1.0], or None to send result data only

        Returns:
            OutcomeResponse from the tool consumer

        Raises:
            ValidationError: If a numeric score is outside [0.0, 1.0], or the
                score is a boolean
        """
        if isinstance(score, bool):
            raise ValidationError(
                "Score must be a number, not a boolean",
                {"score": score}
            )
        if isinstance(score, (int, float)) and not 0.0 <= score <= 1.0:
            raise ValidationError(
                "Score must be between 0.0 and 1.0",
                {"score": score}
            )
        self.operation = pox.REPLACE_REQUEST
        self.score = score
        return self.post_outcome_request()

    def post_delete_result(self) -> OutcomeResponse:
        self.operation = pox.DELETE_REQUEST
        return self.post_outcome_request()

    def post_read_result(self) -> OutcomeResponse:
        self.operation = pox.READ_REQUEST
        return self.post_outcome_request()

    def is_replace_request(self) -> bool:
        return self.operation == pox.REPLACE_REQUEST

    def is_delete_request(self) -> bool:
        return self.operation == pox.DELETE_REQUEST

    def is_read_request(self) -> bool:
        return self.operation == pox.READ_REQUEST

    def outcome_post_successful(self) -> bool:
        return self.outcome_response is not None and self.outcome_response.is_success()

    def has_required_attributes(self) -> bool:
        has_credentials = self.transport is not None or (
            bool(self.consumer_key) and bool(self.consumer_secret)
        )
        return bool(
            has_credentials
            and self.lis_outcome_service_url
            and self.lis_result_sourcedid
            and self.operation
        )

    def post_outcome_request(self) -> OutcomeResponse:
        """
        Sign and POST the assembled document to the outcome service.

        Raises:
            LTIConfigurationError: If the launch did not supply an outcome
                service URL and result sourcedid, or no credentials are known
        """
        if not self.has_required_attributes():
            raise LTIConfigurationError(
                "Outcome request requires consumer credentials, "
                "lis_outcome_service_url, lis_result_sourcedid and an operation",
                {
                    "lis_outcome_service_url": self.lis_outcome_service_url,
                    "lis_result_sourcedid": self.lis_result_sourcedid,
                    "operation": self.operation,
                }
            )

        body = self.generate_request_xml()
        logger.debug("Sending %s for sourcedid %s", self.operation, self.lis_result_sourcedid)

        if self.transport is not None:
            post_response = self.transport.post(self.lis_outcome_service_url, body)
        else:
            with OutcomeTransport(self.consumer_key, self.consumer_secret) as transport:
                post_response = transport.post(self.lis_outcome_service_url, body)

        self.outcome_response = OutcomeResponse.from_post_response(post_response)
        logger.info(
            "%s for sourcedid %s classified as %s",
            self.operation, self.lis_result_sourcedid, self.outcome_response.status.value
        )
        return self.outcome_response

    def has_result_data(self) -> bool:
        """True when the score or any extension has something for ``result``."""
        return self.score is not None or self.extensions.has_result_data()

    def generate_request_xml(self) -> bytes:
        """
        Assemble the ``imsx_POXEnvelopeRequest`` for the current operation.

        Returns:
            UTF-8 encoded XML document
        """
        if self.message_identifier is None:
            self.message_identifier = pox.generate_identifier()

        document, envelope = pox.new_envelope("imsx_POXEnvelopeRequest")

        header = pox.append_element(envelope, "imsx_POXHeader")
        info = pox.append_element(header, "imsx_POXRequestHeaderInfo")
        pox.append_element(info, "imsx_version", pox.POX_VERSION)
        pox.append_element(info, "imsx_messageIdentifier", self.message_identifier)

        body = pox.append_element(envelope, "imsx_POXBody")
        request = pox.append_element(body, f"{self.operation}Request")
        record = pox.append_element(request, "resultRecord")
        guid = pox.append_element(record, "sourcedGUID")
        pox.append_element(guid, "sourcedId", self.lis_result_sourcedid)

        if self.has_result_data():
            result = pox.append_element(record, "result")
            self.result_values(result)

        return pox.to_bytes(document)

    def result_values(self, node: minidom.Element) -> None:
        if self.score is not None:
            result_score = pox.append_element(node, "resultScore")
            pox.append_element(result_score, "language", "en")
            pox.append_element(result_score, "textString", format_score(self.score))
        self.extensions.contribute_result_values(node)

    def process_xml(self, xml: Union[str, bytes]) -> OutcomeRequest:
        """
        Populate this request from an inbound document.

        Raises:
            OutcomeError: If ``xml`` is not well-formed
        """
        doc = pox.parse_document(xml)

        self.message_identifier = pox.get_text(doc, "imsx_POXRequestHeaderInfo/imsx_messageIdentifier")
        self.lis_result_sourcedid = pox.get_text(doc, "resultRecord/sourcedGUID/sourcedId")

        if doc.find(".//deleteResultRequest") is not None:
            self.operation = pox.DELETE_REQUEST
        elif doc.find(".//readResultRequest") is not None:
            self.operation = pox.READ_REQUEST
        elif doc.find(".//replaceResultRequest") is not None:
            self.operation = pox.REPLACE_REQUEST
            self.score = pox.get_text(doc, "resultRecord/result/resultScore/textString")

        self.extension_process_xml(doc)
        return self

    def extension_process_xml(self, doc: ET.Element) -> None:
        self.extensions.extract_fields(doc)


__all__ = ["OutcomeRequest", "Score", "format_score"]

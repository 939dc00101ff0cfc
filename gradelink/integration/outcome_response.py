"""
Outcome service replies and their classification.

A reply is reduced to one of four outcomes: success, processing (accepted but
not final), unsupported (the consumer declined the operation or extension) and
failure, which also covers HTTP errors and bodies that cannot be read.

Copyright (c) 2025 Chronos Algorithmic Observatory
Licensed under MIT License
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Final, Optional, Tuple, Union

import httpx

from gradelink.integration import pox
from gradelink.integration.errors import OutcomeError


logger = logging.getLogger(__name__)

SEVERITY_CODES: Final[Tuple[str, ...]] = ("status", "warning", "error")


class OutcomeStatus(Enum):
    """Closed classification of an outcome service reply."""

    SUCCESS = "success"
    PROCESSING = "processing"
    UNSUPPORTED = "unsupported"
    FAILURE = "failure"

    @classmethod
    def from_code_major(cls, code_major: Optional[str]) -> OutcomeStatus:
        """Map an ``imsx_codeMajor`` value; anything unrecognised is a failure."""
        if code_major is None:
            return cls.FAILURE
        try:
            return cls(code_major.strip().lower())
        except ValueError:
            return cls.FAILURE


CODE_MAJOR_CODES: Final[Tuple[str, ...]] = tuple(status.value for status in OutcomeStatus)


class OutcomeResponse:
    """
    Reply to an outcome request.

    Providers build one from the HTTP response of a post; consumers build one
    by hand and call ``generate_response_xml`` to answer a request.
    """

    def __init__(
        self,
        code_major: Optional[str] = None,
        severity: Optional[str] = None,
        description: Optional[str] = None,
        message_identifier: Optional[str] = None,
        message_ref_identifier: Optional[str] = None,
        operation: Optional[str] = None,
        score: Optional[str] = None,
    ):
        self.code_major = code_major
        self.severity = severity
        self.description = description
        self.message_identifier = message_identifier
        self.message_ref_identifier = message_ref_identifier
        self.operation = operation
        self.score = score
        self.response_code: Optional[int] = None
        self.post_response: Optional[httpx.Response] = None

    @classmethod
    def from_post_response(cls, post_response: httpx.Response) -> OutcomeResponse:
        """
        Build a response from the raw HTTP reply of the outcome service.

        Args:
            post_response: The httpx response returned by the transport

        Returns:
            OutcomeResponse populated from the reply body
        """
        response = cls()
        response.process_post_response(post_response)
        return response

    def process_post_response(self, post_response: httpx.Response) -> OutcomeResponse:
        self.post_response = post_response
        self.response_code = post_response.status_code

        if not post_response.content:
            logger.warning(
                "Outcome service returned HTTP %s with an empty body",
                post_response.status_code
            )
            return self

        try:
            self.process_xml(post_response.content)
        except OutcomeError as e:
            logger.warning("Unreadable outcome service reply (HTTP %s): %s",
                           post_response.status_code, e)
        return self

    def process_xml(self, xml: Union[str, bytes]) -> OutcomeResponse:
        """
        Read status information and, for readResult replies, the score.

        Raises:
            OutcomeError: If ``xml`` is not well-formed
        """
        doc = pox.parse_document(xml)

        self.message_identifier = pox.get_text(
            doc, "imsx_POXResponseHeaderInfo/imsx_messageIdentifier"
        )
        code_major = pox.get_text(doc, "imsx_statusInfo/imsx_codeMajor")
        self.code_major = code_major.lower() if code_major else None
        severity = pox.get_text(doc, "imsx_statusInfo/imsx_severity")
        self.severity = severity.lower() if severity else None
        self.description = pox.get_text(doc, "imsx_statusInfo/imsx_description")
        self.message_ref_identifier = pox.get_text(doc, "imsx_statusInfo/imsx_messageRefIdentifier")
        self.operation = pox.get_text(doc, "imsx_statusInfo/imsx_operationRefIdentifier")
        self.score = pox.get_text(doc, "readResultResponse/result/resultScore/textString")
        return self

    @property
    def status(self) -> OutcomeStatus:
        if self.response_code is not None and not 200 <= self.response_code < 300:
            return OutcomeStatus.FAILURE
        return OutcomeStatus.from_code_major(self.code_major)

    def is_success(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    def is_processing(self) -> bool:
        return self.status is OutcomeStatus.PROCESSING

    def is_unsupported(self) -> bool:
        return self.status is OutcomeStatus.UNSUPPORTED

    def is_failure(self) -> bool:
        return self.status is OutcomeStatus.FAILURE

    def has_warning(self) -> bool:
        return self.severity == "warning"

    def has_error(self) -> bool:
        return self.severity == "error"

    def generate_response_xml(self) -> bytes:
        """
        Serialize this response as an ``imsx_POXEnvelopeResponse``.

        The operation body is omitted for unsupported replies; readResult
        replies carry the score.

        Returns:
            UTF-8 encoded XML document
        """
        document, envelope = pox.new_envelope("imsx_POXEnvelopeResponse")

        header = pox.append_element(envelope, "imsx_POXHeader")
        info = pox.append_element(header, "imsx_POXResponseHeaderInfo")
        pox.append_element(info, "imsx_version", pox.POX_VERSION)
        pox.append_element(info, "imsx_messageIdentifier",
                           self.message_identifier or pox.generate_identifier())
        status_info = pox.append_element(info, "imsx_statusInfo")
        pox.append_element(status_info, "imsx_codeMajor", self.code_major)
        pox.append_element(status_info, "imsx_severity", self.severity)
        pox.append_element(status_info, "imsx_description", self.description)
        pox.append_element(status_info, "imsx_messageRefIdentifier", self.message_ref_identifier)
        pox.append_element(status_info, "imsx_operationRefIdentifier", self.operation)

        body = pox.append_element(envelope, "imsx_POXBody")
        if self.operation and self.code_major != OutcomeStatus.UNSUPPORTED.value:
            operation_response = pox.append_element(body, f"{self.operation}Response")
            if self.operation == pox.READ_REQUEST:
                result = pox.append_element(operation_response, "result")
                score = pox.append_element(result, "resultScore")
                pox.append_element(score, "language", "en")
                pox.append_element(score, "textString",
                                   "" if self.score is None else str(self.score))

        return pox.to_bytes(document)

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(status={self.status.value!r}, "
                f"operation={self.operation!r}, response_code={self.response_code!r})")


__all__ = ["OutcomeStatus", "OutcomeResponse", "CODE_MAJOR_CODES", "SEVERITY_CODES"]

"""
Plain Old XML (POX) document primitives for the LTI Basic Outcomes service.

Outgoing documents are assembled with ``xml.dom.minidom`` because it can emit
CDATA sections; incoming documents are read with ``xml.etree.ElementTree`` with
the IMS namespace stripped so lookups can use bare element paths.

Copyright (c) 2025 Chronos Algorithmic Observatory
Licensed under MIT License
"""

from __future__ import annotations

import uuid
import xml.etree.ElementTree as ET
from typing import Final, List, Optional, Tuple, Union
from xml.dom import minidom

from gradelink.integration.errors import OutcomeError


POX_NAMESPACE: Final[str] = "http://www.imsglobal.org/services/ltiv1p1/xsd/imsoms_v1p0"
POX_VERSION: Final[str] = "V1.0"

REPLACE_REQUEST: Final[str] = "replaceResult"
READ_REQUEST: Final[str] = "readResult"
DELETE_REQUEST: Final[str] = "deleteResult"

_CDATA_TERMINATOR: Final[str] = "]]>"


def generate_identifier() -> str:
    """Message identifier for a new envelope."""
    return str(uuid.uuid4())


def new_envelope(root_tag: str) -> Tuple[minidom.Document, minidom.Element]:
    """
    Create an empty POX envelope document.

    Args:
        root_tag: Envelope element name, e.g. ``imsx_POXEnvelopeRequest``

    Returns:
        Tuple of (document, root element)
    """
    document = minidom.Document()
    root = document.createElement(root_tag)
    root.setAttribute("xmlns", POX_NAMESPACE)
    document.appendChild(root)
    return document, root


def append_element(parent: minidom.Element, tag: str, text: Optional[str] = None) -> minidom.Element:
    """Append a child element, with escaped character content when given."""
    document = parent.ownerDocument
    element = document.createElement(tag)
    if text is not None:
        element.appendChild(document.createTextNode(str(text)))
    parent.appendChild(element)
    return element


def append_cdata_element(parent: minidom.Element, tag: str, data: str) -> minidom.Element:
    """
    Append a child element whose content is raw CDATA.

    A ``]]>`` sequence inside ``data`` cannot live in one CDATA section, so the
    content is split across adjacent sections; parsers join them back into the
    original string.
    """
    document = parent.ownerDocument
    element = document.createElement(tag)
    for section in _cdata_sections(str(data)):
        element.appendChild(document.createCDATASection(section))
    parent.appendChild(element)
    return element


def _cdata_sections(data: str) -> List[str]:
    chunks = data.split(_CDATA_TERMINATOR)
    if len(chunks) == 1:
        return [data]
    sections = [chunks[0] + "]]"]
    sections.extend(">" + chunk + "]]" for chunk in chunks[1:-1])
    sections.append(">" + chunks[-1])
    return sections


def find_child(parent: minidom.Element, tag: str) -> Optional[minidom.Element]:
    """Return the first direct child element named ``tag``."""
    for child in parent.childNodes:
        if child.nodeType == child.ELEMENT_NODE and child.tagName == tag:
            return child
    return None


def find_or_append_element(parent: minidom.Element, tag: str) -> minidom.Element:
    """Reuse an existing direct child named ``tag`` or append a new one."""
    existing = find_child(parent, tag)
    if existing is not None:
        return existing
    return append_element(parent, tag)


def to_bytes(document: minidom.Document) -> bytes:
    return document.toxml(encoding="UTF-8")


def parse_document(xml: Union[str, bytes]) -> ET.Element:
    """
    Parse a POX document and strip namespaces from every tag.

    Raises:
        OutcomeError: If the payload is not well-formed XML
    """
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as e:
        raise OutcomeError(f"Malformed POX document: {e}") from e

    for element in root.iter():
        if isinstance(element.tag, str) and element.tag.startswith("{"):
            element.tag = element.tag.split("}", 1)[1]
    return root


def get_text(root: ET.Element, path: str) -> Optional[str]:
    """
    Text content of the first element matching ``path`` anywhere below ``root``.

    Returns None when the element is absent or empty.
    """
    element = root.find(f".//{path}")
    if element is None:
        return None
    text = "".join(element.itertext())
    return text or None


__all__ = [
    "POX_NAMESPACE",
    "POX_VERSION",
    "REPLACE_REQUEST",
    "READ_REQUEST",
    "DELETE_REQUEST",
    "generate_identifier",
    "new_envelope",
    "append_element",
    "append_cdata_element",
    "find_child",
    "find_or_append_element",
    "to_bytes",
    "parse_document",
    "get_text",
]

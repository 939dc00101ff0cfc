"""
Extension chain for outcome requests.

An outcome request knows how to serialize a score and nothing more. Optional
capabilities implement ``OutcomeRequestExtension`` and are held in an ordered
``ExtensionChain``; the request asks the chain whether anything needs a
``result`` element, lets every link contribute to it, and offers every link
the parsed document of an inbound request. Registration order is the order in
which links contribute and extract. Links only ever add to the document.

Copyright (c) 2025 Chronos Algorithmic Observatory
Licensed under MIT License
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import (
    Callable, Iterable, Iterator, Optional, Protocol, Tuple, Type, TypeVar,
    runtime_checkable
)
from xml.dom import minidom


logger = logging.getLogger(__name__)

X = TypeVar('X')


@runtime_checkable
class OutcomeRequestExtension(Protocol):
    """Protocol for optional contributors to an outcome request document."""

    def has_result_data(self) -> bool:
        """Whether this link has anything to put under ``result``."""
        ...

    def contribute_result_values(self, node: minidom.Element) -> None:
        """Append this link's elements to the outgoing ``result`` node."""
        ...

    def extract_fields(self, document: ET.Element) -> None:
        """Read this link's fields from an inbound, namespace-stripped document."""
        ...


ExtensionFactory = Callable[[], OutcomeRequestExtension]


class ExtensionChain:
    """
    Ordered, per-request set of extension instances.

    Each request owns its own chain so extension state (the values to send or
    the values read back) never leaks between requests.
    """

    def __init__(self, extensions: Iterable[OutcomeRequestExtension] = ()):
        self._extensions: Tuple[OutcomeRequestExtension, ...] = tuple(extensions)

    @classmethod
    def from_factories(cls, factories: Iterable[ExtensionFactory]) -> ExtensionChain:
        """Instantiate a fresh link from every factory, keeping their order."""
        return cls(factory() for factory in factories)

    def __iter__(self) -> Iterator[OutcomeRequestExtension]:
        return iter(self._extensions)

    def __len__(self) -> int:
        return len(self._extensions)

    def find(self, kind: Type[X]) -> Optional[X]:
        """Return the first link that is an instance of ``kind``."""
        for extension in self._extensions:
            if isinstance(extension, kind):
                return extension
        return None

    def has_result_data(self) -> bool:
        has_data = False
        for extension in self._extensions:
            has_data = has_data or extension.has_result_data()
        return has_data

    def contribute_result_values(self, node: minidom.Element) -> None:
        for extension in self._extensions:
            extension.contribute_result_values(node)

    def extract_fields(self, document: ET.Element) -> None:
        for extension in self._extensions:
            extension.extract_fields(document)


class ExtensionRegistry:
    """
    Registration point for extension factories.

    A provider or consumer registers factories once; the resulting tuple is
    immutable and can be shared by every request issued afterwards.
    """

    def __init__(self, factories: Iterable[ExtensionFactory] = ()):
        self._factories: Tuple[ExtensionFactory, ...] = tuple(factories)

    @property
    def factories(self) -> Tuple[ExtensionFactory, ...]:
        return self._factories

    def register(self, factories: Iterable[ExtensionFactory]) -> Tuple[ExtensionFactory, ...]:
        """
        Append factories to the registration order.

        Args:
            factories: Zero-argument callables producing extension instances

        Returns:
            The complete, ordered factory tuple
        """
        added = tuple(factories)
        self._factories = self._factories + added
        logger.debug(
            "Registered outcome request extensions: %s",
            [getattr(f, "__name__", repr(f)) for f in added]
        )
        return self._factories

    def new_chain(self) -> ExtensionChain:
        return ExtensionChain.from_factories(self._factories)


__all__ = [
    "OutcomeRequestExtension",
    "ExtensionFactory",
    "ExtensionChain",
    "ExtensionRegistry",
]

"""Classification of namespace declarations among raw attributes.

With namespace processing switched off, the parser reports ``xmlns`` and
``xmlns:prefix`` declarations as plain attributes. The functions here tell them
apart from data attributes and turn them into ``Namespace`` bindings. They are
pure: the caller decides where a binding is applied.
"""

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Tuple, Union

XMLNS = "xmlns"
PREFIX_SEPARATOR = ":"

AttributeSource = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


@dataclass(frozen=True)
class Namespace:
    """A namespace binding; ``prefix`` None means the default namespace."""

    uri: str
    prefix: Optional[str] = None

    @property
    def is_default(self) -> bool:
        return self.prefix is None

    @property
    def attribute_name(self) -> str:
        """The declaration attribute that produces this binding."""
        if self.prefix is None:
            return XMLNS
        return f"{XMLNS}{PREFIX_SEPARATOR}{self.prefix}"


def is_namespace_declaration(name: str) -> bool:
    """Return True if ``name`` is ``xmlns`` or starts with ``xmlns:``."""
    return name == XMLNS or name.startswith(XMLNS + PREFIX_SEPARATOR)


def resolve_namespace(name: str, value: str) -> Optional[Namespace]:
    """Build the binding declared by an attribute, or None for data attributes.

    ``xmlns`` and ``xmlns:`` give the default namespace. For ``xmlns:p`` the
    prefix is the first segment after the separator. The URI is the raw
    attribute value.
    """
    if not is_namespace_declaration(name):
        return None

    segments = name.split(PREFIX_SEPARATOR)
    prefix = segments[1] if len(segments) > 1 and segments[1] else None
    return Namespace(uri=value, prefix=prefix)


def iter_attributes(attributes: AttributeSource) -> Iterable[Tuple[str, str]]:
    """Yield ``(name, value)`` pairs from a mapping, SAX attributes or pairs."""
    if hasattr(attributes, "items"):
        return list(attributes.items())  # type: ignore[union-attr]
    return list(attributes)


def split_attributes(
    attributes: AttributeSource,
) -> Tuple[List[Namespace], List[Tuple[str, str]]]:
    """Separate namespace declarations from ordinary attributes, keeping order."""
    namespaces: List[Namespace] = []
    ordinary: List[Tuple[str, str]] = []
    for name, value in iter_attributes(attributes):
        namespace = resolve_namespace(name, value)
        if namespace is None:
            ordinary.append((name, value))
        else:
            namespaces.append(namespace)
    return namespaces, ordinary

"""XML codec built on :mod:`xml.etree.ElementTree`.

Purpose
-------
Serialise a configuration tree as a ``<config>`` document and read such
documents back into plain nested data.

Conventions
-----------
* Each mapping key becomes a child element. Integer keys and keys that are not
  usable as XML names become ``<item>``; sequences become a run of ``<item>``
  children.
* Scalars become text: booleans as ``true``/``false``, ``None`` as an empty
  element. Decoded text is always a string (stripped; empty element → ``""``).
* Repeated sibling tags decode into a list; an element whose children are all
  ``<item>`` decodes into a list.
* Attributes are folded under an ``"@attributes"`` mapping. A leaf element
  with attributes decodes to ``{"@attributes": {...}, "@text": text}`` (the
  ``"@text"`` entry only when text is present). Encoding honours both keys so
  decoded documents can be written back.
"""

from __future__ import annotations

import re
from typing import Any
from xml.etree import ElementTree

from ...domain.values import ValueKind, is_index, kind_of
from .structured import BaseCodec

ROOT_TAG = "config"
ITEM_TAG = "item"
ATTRIBUTES_KEY = "@attributes"
TEXT_KEY = "@text"
XML_DECLARATION = '<?xml version="1.0"?>'

_NAME = re.compile(r"^[A-Za-z_][\w.-]*$")


class XMLCodec(BaseCodec):
    """XML documents rooted at ``<config>``."""

    format = "xml"

    def decode(self, text: str, *, source: str = "<string>") -> Any:
        """Return the mapping (or list) held by the document root.

        Examples
        --------
        >>> XMLCodec().decode("<config><foo>bar</foo><tags><item>a</item><item>b</item></tags></config>")
        {'foo': 'bar', 'tags': ['a', 'b']}
        """

        try:
            root = ElementTree.fromstring(text)
        except ElementTree.ParseError as exc:
            raise self._invalid(source, exc) from exc
        value = _element_value(root)
        if value == "":
            return {}
        return self._ensure_container(value, source=source)

    def encode(self, data: Any) -> str:
        """Return an indented ``<config>`` document with an XML declaration.

        Examples
        --------
        >>> print(XMLCodec().encode({"foo": "bar", "baz": {"hello": "world"}}), end="")
        <?xml version="1.0"?>
        <config>
            <foo>bar</foo>
            <baz>
                <hello>world</hello>
            </baz>
        </config>
        """

        root = ElementTree.Element(ROOT_TAG)
        _fill(root, data)
        ElementTree.indent(root, space="    ")
        return f"{XML_DECLARATION}\n{ElementTree.tostring(root, encoding='unicode')}\n"


def _fill(element: ElementTree.Element, value: Any) -> None:
    kind = kind_of(value)
    if kind is ValueKind.NODE:
        for key, item in value.items():
            if key == ATTRIBUTES_KEY and kind_of(item) is ValueKind.NODE:
                for name, attribute in item.items():
                    element.set(str(name), _text(attribute) or "")
            elif key == TEXT_KEY and kind_of(item) is ValueKind.SCALAR:
                element.text = _text(item)
            else:
                _fill(ElementTree.SubElement(element, _tag(key)), item)
    elif kind is ValueKind.SEQUENCE:
        for item in value:
            _fill(ElementTree.SubElement(element, ITEM_TAG), item)
    else:
        element.text = _text(value)


def _tag(key: Any) -> str:
    if is_index(key) or not _NAME.match(str(key)):
        return ITEM_TAG
    return str(key)


def _text(value: Any) -> str | None:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return None
    return str(value)


def _element_value(element: ElementTree.Element) -> Any:
    children = list(element)
    attributes = dict(element.attrib)
    text = (element.text or "").strip()
    if not children:
        if not attributes:
            return text
        leaf: dict[str, Any] = {ATTRIBUTES_KEY: attributes}
        if text:
            leaf[TEXT_KEY] = text
        return leaf
    if not attributes and all(child.tag == ITEM_TAG for child in children):
        return [_element_value(child) for child in children]

    groups: dict[str, list[Any]] = {}
    for child in children:
        groups.setdefault(child.tag, []).append(_element_value(child))
    result: dict[str, Any] = {ATTRIBUTES_KEY: attributes} if attributes else {}
    for tag, values in groups.items():
        result[tag] = values[0] if len(values) == 1 else values
    return result

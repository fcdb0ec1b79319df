"""Python data -> XML bytes for request entities.

Serializes the JSON-compatible data produced by dumping a dataclass or
pydantic model (dicts, lists, strings, numbers, booleans, None) into an XML
document whose root element is named by the caller, normally after the
entity's class.

Limitation: no attributes or namespaces are emitted. Element names are
taken directly from dict keys, which must be valid XML names.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import Any

# XML 1.0 Name production, restricted to the ASCII range plus non-ASCII letters.
_XML_NAME = re.compile(r"^[A-Za-z_\u00C0-\uFFFD][A-Za-z0-9_.\-\u00B7\u00C0-\uFFFD]*$")

# Characters outside the XML 1.0 Char production
_XML_INVALID_CHAR = re.compile(r"[^\t\n\r\u0020-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


def to_xml(root_tag: str, value: Any) -> bytes:
    """Serialize value under a root element named root_tag.

    Conversion rules:
    - dict -> child elements, one per key
    - list under a key -> repeated sibling elements with that key's tag
    - None -> empty element (``<Tag />``)
    - bool -> ``true`` / ``false`` (JSON spelling)
    - other scalars -> text content via str()
    - characters XML 1.0 does not allow in text are replaced with U+FFFD

    Returns:
        UTF-8 encoded XML bytes with an XML declaration.

    Raises:
        ValueError: If root_tag or any dict key is not a valid XML name.
    """
    root_element = _to_element(root_tag, value)
    return ET.tostring(root_element, encoding="utf-8", xml_declaration=True)


def _check_name(tag: str) -> str:
    if not isinstance(tag, str) or not _XML_NAME.match(tag):
        raise ValueError(f"'{tag}' is not a valid XML element name")
    return tag


def _to_element(tag: str, value: Any) -> ET.Element:
    element = ET.Element(_check_name(tag))

    if value is None:
        pass
    elif isinstance(value, dict):
        for key, child_value in value.items():
            if isinstance(child_value, list):
                for item in child_value:
                    element.append(_to_element(key, item))
            else:
                element.append(_to_element(key, child_value))
    elif isinstance(value, list):
        # Only reached for nested lists (list of lists); items get a generic tag
        for item in value:
            element.append(_to_element("item", item))
    elif isinstance(value, bool):
        element.text = "true" if value else "false"
    else:
        element.text = _XML_INVALID_CHAR.sub("\ufffd", str(value))

    return element

"""Attribute paths in standard attribute notation: ``[schema:]attribute[.subAttribute]``.

Paths are used both to select which attributes take part in a diff and to
name the attributes a PATCH body removes.  The schema prefix is omitted when
it is the resource's core schema, so ``name.givenName`` and
``urn:ietf:params:scim:schemas:core:2.0:User:name.givenName`` are the same
path for a User.
"""

import re
from functools import total_ordering
from typing import Optional, Tuple

from .schemas import CORE_USER_URN


# RFC 7643 ATTRNAME, plus the "$ref" sub-attribute
_ATTRNAME = re.compile(r"^\$?[A-Za-z][A-Za-z0-9_\-]*$")


class ParseError(ValueError):
    """An attribute path string could not be parsed.

    Attributes:
        token:  The offending part of the input.
        path:   The full input string.
    """

    def __init__(self, message: str, token: str, path: str):
        super().__init__(f"{message}: '{token}' in attribute path '{path}'")
        self.token = token
        self.path = path


@total_ordering
class AttributePath:
    """A parsed attribute path.

    Equality, hashing and ordering ignore case on all three components.
    ``default_schema`` only decides whether ``str()`` writes the schema
    prefix; it is not part of the path's identity.
    """

    def __init__(
        self,
        attribute_schema: str,
        attribute_name: str,
        sub_attribute_name: Optional[str] = None,
        default_schema: str = CORE_USER_URN,
    ):
        self.attribute_schema = attribute_schema
        self.attribute_name = attribute_name
        self.sub_attribute_name = sub_attribute_name
        self.default_schema = default_schema

    @classmethod
    def parse(cls, path: str, default_schema: str = CORE_USER_URN) -> "AttributePath":
        """Parse ``[schema:]attribute[.subAttribute]``.

        The schema is everything before the last ``:``; schema URNs contain
        colons and dots of their own, attribute names contain neither.

        Raises:
            ParseError: if the schema, attribute or sub-attribute part is
                empty, there is more than one ``.`` after the schema, or a
                name is not a valid SCIM attribute name.
        """
        if not isinstance(path, str) or not path:
            raise ParseError("Empty attribute path", str(path), str(path))

        colon = path.rfind(":")
        if colon == -1:
            schema = default_schema
            attribute = path
        else:
            schema = path[:colon]
            attribute = path[colon + 1:]
            if not schema:
                raise ParseError("Missing schema before ':'", path[:colon + 1], path)
            if not attribute:
                raise ParseError("Missing attribute name after schema", path, path)

        parts = attribute.split(".")
        if len(parts) > 2:
            raise ParseError("Too many '.' separators", attribute, path)

        name = parts[0]
        if not _ATTRNAME.match(name):
            raise ParseError("Invalid attribute name", name or attribute, path)

        sub_name = None
        if len(parts) == 2:
            sub_name = parts[1]
            if not _ATTRNAME.match(sub_name):
                raise ParseError("Invalid sub-attribute name", sub_name or attribute, path)

        return cls(schema, name, sub_name, default_schema)

    def _key(self) -> Tuple[str, str, str]:
        return (
            self.attribute_schema.lower(),
            self.attribute_name.lower(),
            (self.sub_attribute_name or "").lower(),
        )

    def __eq__(self, other):
        if not isinstance(other, AttributePath):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other):
        if not isinstance(other, AttributePath):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self):
        return hash(self._key())

    def __str__(self):
        text = self.attribute_name
        if self.sub_attribute_name is not None:
            text = f"{text}.{self.sub_attribute_name}"
        if self.attribute_schema.lower() != self.default_schema.lower():
            text = f"{self.attribute_schema}:{text}"
        return text

    def __repr__(self):
        return f"AttributePath({str(self)!r})"

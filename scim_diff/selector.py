"""Restricts a diff to a set of attributes and sub-attributes."""

from typing import Dict, FrozenSet, Iterable, Optional

from .attribute_path import AttributePath
from .schemas import CORE_USER_URN


class AttributeSelector:
    """Answers "should this attribute (or sub-attribute) be compared?".

    Built once from attribute paths.  With no paths every attribute matches.
    Otherwise the paths are indexed by lower-cased schema, then attribute
    name; each attribute maps to either ``None`` (the whole attribute was
    requested) or the set of requested sub-attribute names.  Requesting the
    whole attribute wins over requesting some of its sub-attributes.
    """

    def __init__(self, paths: Optional[Iterable[AttributePath]] = None):
        index: Dict[str, Dict[str, Optional[FrozenSet[str]]]] = {}
        for path in paths or ():
            schema_attrs = index.setdefault(path.attribute_schema.lower(), {})
            name = path.attribute_name.lower()
            if path.sub_attribute_name is None:
                schema_attrs[name] = None
            elif name not in schema_attrs:
                schema_attrs[name] = frozenset([path.sub_attribute_name.lower()])
            elif schema_attrs[name] is not None:
                schema_attrs[name] = schema_attrs[name] | {path.sub_attribute_name.lower()}
        self._index = index or None

    @classmethod
    def from_strings(
        cls, paths: Optional[Iterable[str]], default_schema: str = CORE_USER_URN
    ) -> "AttributeSelector":
        """Parse attribute path strings; paths without a schema prefix belong to ``default_schema``.

        Raises:
            ParseError: on the first malformed path.
        """
        return cls(AttributePath.parse(p, default_schema) for p in paths or ())

    @property
    def is_restricted(self) -> bool:
        return self._index is not None

    def matches(self, schema: str, name: str) -> bool:
        """True if the attribute takes part in the diff, whatever sub-attributes were requested."""
        if self._index is None:
            return True
        return name.lower() in self._index.get(schema.lower(), {})

    def matches_sub_attribute(self, schema: str, name: str, sub_name: str) -> bool:
        """True if the sub-attribute of a complex attribute takes part in the diff."""
        if self._index is None:
            return True
        schema_attrs = self._index.get(schema.lower(), {})
        name = name.lower()
        if name not in schema_attrs:
            return False
        subs = schema_attrs[name]
        return subs is None or sub_name.lower() in subs

    def filters_sub_attributes(self, schema: str, name: str) -> bool:
        """True if only some sub-attributes of the attribute were requested."""
        if self._index is None:
            return False
        return self._index.get(schema.lower(), {}).get(name.lower()) is not None

    def __repr__(self):
        if self._index is None:
            return "AttributeSelector(<all>)"
        return f"AttributeSelector({self._index!r})"

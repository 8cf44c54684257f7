"""In-memory attribute tree for SCIM resources.

A ``ScimObject`` maps schema URNs to attributes, an attribute holds one or
more values, and a complex value holds sub-attributes.  Schema, attribute and
sub-attribute names are matched case-insensitively everywhere; the spelling
kept for output is the descriptor's.

Values and attributes are immutable once built and hash by content, so they
can be used as set members when reconciling multi-valued attributes.
"""

from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .descriptors import AttributeDescriptor


class ScimAttributeValue:
    """A single attribute value: either a JSON scalar or a set of sub-attributes."""

    def __init__(self, value: Any = None, attributes: Optional[Iterable["ScimAttribute"]] = None):
        self._value = value
        self._attributes: Optional[Dict[str, ScimAttribute]] = None
        if attributes is not None:
            self._attributes = {}
            for attribute in attributes:
                self._attributes[attribute.name.lower()] = attribute

    @classmethod
    def create_simple(cls, value: Any) -> "ScimAttributeValue":
        return cls(value=value)

    @classmethod
    def create_complex(cls, attributes: Iterable["ScimAttribute"]) -> "ScimAttributeValue":
        return cls(attributes=list(attributes))

    @property
    def is_complex(self) -> bool:
        return self._attributes is not None

    @property
    def value(self) -> Any:
        """The scalar value; None for complex values."""
        return self._value

    @property
    def attributes(self) -> Dict[str, "ScimAttribute"]:
        """Sub-attributes keyed by lower-cased name, in insertion order (a copy)."""
        return dict(self._attributes or {})

    def get_attribute(self, name: str) -> Optional["ScimAttribute"]:
        if self._attributes is None:
            return None
        return self._attributes.get(name.lower())

    def has_attribute(self, name: str) -> bool:
        return self._attributes is not None and name.lower() in self._attributes

    def _simple_key(self) -> Tuple[bool, Any]:
        # True == 1 in Python; a boolean never equals a number here
        return (isinstance(self._value, bool), self._value)

    def __eq__(self, other):
        if not isinstance(other, ScimAttributeValue):
            return NotImplemented
        if self.is_complex != other.is_complex:
            return False
        if self.is_complex:
            return self._attributes == other._attributes
        return self._simple_key() == other._simple_key()

    def __hash__(self):
        if self._attributes is not None:
            return hash(frozenset(self._attributes.items()))
        return hash(self._simple_key())

    def __repr__(self):
        if self._attributes is not None:
            inner = ", ".join(repr(a) for a in self._attributes.values())
            return f"ScimAttributeValue({{{inner}}})"
        return f"ScimAttributeValue({self._value!r})"


class ScimAttribute:
    """An attribute: its descriptor plus one value, or an ordered sequence of values."""

    def __init__(self, descriptor: AttributeDescriptor, values: Iterable[ScimAttributeValue]):
        values = tuple(values)
        # A multi-valued attribute may be present with no values (an empty array)
        if not descriptor.multi_valued and len(values) != 1:
            raise ValueError(
                f"Single-valued attribute '{descriptor.name}' must hold exactly one value, "
                f"got {len(values)}"
            )
        self._descriptor = descriptor
        self._values = values

    @classmethod
    def create(cls, descriptor: AttributeDescriptor, *values: ScimAttributeValue) -> "ScimAttribute":
        return cls(descriptor, values)

    @property
    def descriptor(self) -> AttributeDescriptor:
        return self._descriptor

    @property
    def namespace(self) -> str:
        return self._descriptor.namespace

    @property
    def name(self) -> str:
        return self._descriptor.name

    @property
    def values(self) -> Tuple[ScimAttributeValue, ...]:
        return self._values

    @property
    def value(self) -> ScimAttributeValue:
        """The first (for single-valued attributes, the only) value."""
        return self._values[0]

    def key(self) -> Tuple[str, str]:
        return (self.namespace.lower(), self.name.lower())

    def __eq__(self, other):
        if not isinstance(other, ScimAttribute):
            return NotImplemented
        return self.key() == other.key() and self._values == other._values

    def __hash__(self):
        return hash((self.key(), self._values))

    def __repr__(self):
        if self._descriptor.multi_valued:
            return f"ScimAttribute({self.name}={list(self._values)!r})"
        return f"ScimAttribute({self.name}={self._values[0]!r})"


class ScimObject:
    """Attributes grouped by schema URN.

    Within the object an attribute is identified by ``(schema, name)``,
    compared case-insensitively.  Setting an attribute that is already present
    replaces it in place, so iteration order is first-set order.
    """

    def __init__(self, attributes: Iterable[ScimAttribute] = ()):
        self._schemas: Dict[str, Dict[str, ScimAttribute]] = {}
        self._schema_names: Dict[str, str] = {}
        for attribute in attributes:
            self.set_attribute(attribute)

    @property
    def schemas(self) -> List[str]:
        """Schema URNs that have at least one attribute, in first-seen order."""
        return list(self._schema_names.values())

    def has_schema(self, schema: str) -> bool:
        return schema.lower() in self._schemas

    def get_attributes(self, schema: str) -> List[ScimAttribute]:
        return list(self._schemas.get(schema.lower(), {}).values())

    def get_attribute(self, schema: str, name: str) -> Optional[ScimAttribute]:
        return self._schemas.get(schema.lower(), {}).get(name.lower())

    def has_attribute(self, schema: str, name: str) -> bool:
        return self.get_attribute(schema, name) is not None

    def set_attribute(self, attribute: ScimAttribute) -> None:
        schema_key, name_key = attribute.key()
        if schema_key not in self._schemas:
            self._schemas[schema_key] = {}
            self._schema_names[schema_key] = attribute.namespace
        self._schemas[schema_key][name_key] = attribute

    def remove_attribute(self, schema: str, name: str) -> bool:
        """Remove an attribute; returns False if it was not present."""
        schema_key = schema.lower()
        schema_attrs = self._schemas.get(schema_key)
        if schema_attrs is None or schema_attrs.pop(name.lower(), None) is None:
            return False
        if not schema_attrs:
            del self._schemas[schema_key]
            del self._schema_names[schema_key]
        return True

    def __iter__(self) -> Iterator[ScimAttribute]:
        for schema_attrs in list(self._schemas.values()):
            yield from list(schema_attrs.values())

    def __len__(self):
        return sum(len(attrs) for attrs in self._schemas.values())

    def __eq__(self, other):
        if not isinstance(other, ScimObject):
            return NotImplemented
        return self._schemas == other._schemas

    def __repr__(self):
        return f"ScimObject({list(self)!r})"

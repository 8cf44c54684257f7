"""Attribute and resource descriptors: the schema metadata the diff engine consults.

Descriptors are built once from the plain schema definitions in
``schemas.py`` and shared by reference afterwards.  Nothing in this package
mutates a descriptor after construction.
"""

from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional

from .schemas import RESOURCE_TYPES, get_schema


# Sub-attributes every multi-valued complex attribute is expected to define.
# ``operation`` carries the per-value "delete" marker in PATCH bodies.
NORMATIVE_SUB_ATTRIBUTES = ("type", "primary", "operation", "display", "value")

_NORMATIVE_TYPES = {"primary": "boolean"}


class DataType(Enum):
    """SCIM attribute data types (RFC 7643 section 2.3)."""

    STRING = "string"
    BOOLEAN = "boolean"
    DECIMAL = "decimal"
    INTEGER = "integer"
    DATETIME = "dateTime"
    BINARY = "binary"
    REFERENCE = "reference"
    COMPLEX = "complex"

    @classmethod
    def parse(cls, name: str) -> "DataType":
        lower = name.lower()
        for member in cls:
            if member.value.lower() == lower:
                return member
        raise ValueError(f"Unknown SCIM data type: '{name}'")


class AttributeDescriptor:
    """Immutable metadata for one attribute or sub-attribute.

    Sub-attributes are looked up case-insensitively and keep the order in
    which the schema declares them.
    """

    def __init__(
        self,
        name: str,
        namespace: str,
        data_type: DataType,
        multi_valued: bool = False,
        read_only: bool = False,
        required: bool = False,
        sub_attributes: Optional[Iterable["AttributeDescriptor"]] = None,
        description: Optional[str] = None,
    ):
        self._name = name
        self._namespace = namespace
        self._data_type = data_type
        self._multi_valued = multi_valued
        self._read_only = read_only
        self._required = required
        self._description = description
        self._sub_attributes: Dict[str, AttributeDescriptor] = {}
        for sub in sub_attributes or ():
            self._sub_attributes[sub.name.lower()] = sub

    @property
    def name(self) -> str:
        return self._name

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def data_type(self) -> DataType:
        return self._data_type

    @property
    def multi_valued(self) -> bool:
        return self._multi_valued

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def required(self) -> bool:
        return self._required

    @property
    def description(self) -> Optional[str]:
        return self._description

    @property
    def is_complex(self) -> bool:
        return self._data_type is DataType.COMPLEX

    @property
    def sub_attributes(self) -> List["AttributeDescriptor"]:
        return list(self._sub_attributes.values())

    def get_sub_attribute(self, name: str) -> Optional["AttributeDescriptor"]:
        """Case-insensitive sub-attribute lookup."""
        return self._sub_attributes.get(name.lower())

    def __repr__(self):
        flags = []
        if self._multi_valued:
            flags.append("multiValued")
        if self._read_only:
            flags.append("readOnly")
        suffix = f", {', '.join(flags)}" if flags else ""
        return f"AttributeDescriptor({self._namespace}:{self._name}, {self._data_type.value}{suffix})"

    @classmethod
    def from_definition(cls, definition: Dict[str, Any], namespace: str) -> "AttributeDescriptor":
        """Build a descriptor from an RFC 7643 attribute definition.

        Multi-valued complex attributes get any normative sub-attribute the
        schema leaves out, so every one of them can carry an ``operation``
        marker.
        """
        data_type = DataType.parse(definition.get("type", "string"))
        multi_valued = bool(definition.get("multiValued", False))
        subs = [
            cls.from_definition(sub, namespace)
            for sub in definition.get("subAttributes", [])
        ]
        if data_type is DataType.COMPLEX and multi_valued:
            declared = {sub.name.lower() for sub in subs}
            for normative in NORMATIVE_SUB_ATTRIBUTES:
                if normative not in declared:
                    subs.append(cls(
                        normative,
                        namespace,
                        DataType.parse(_NORMATIVE_TYPES.get(normative, "string")),
                    ))
        return cls(
            definition["name"],
            namespace,
            data_type,
            multi_valued=multi_valued,
            read_only=definition.get("mutability") == "readOnly",
            required=bool(definition.get("required", False)),
            sub_attributes=subs,
            description=definition.get("description"),
        )


class ResourceDescriptor:
    """A resource type: its core schema, extension schemas, and attribute descriptors.

    The core schema URN is the default namespace: attribute paths in it are
    written without a ``namespace:`` prefix.
    """

    def __init__(
        self,
        name: str,
        core_schema: str,
        attributes: Iterable[AttributeDescriptor],
        extension_schemas: Iterable[str] = (),
    ):
        self._name = name
        self._core_schema = core_schema
        self._schemas = [core_schema] + list(extension_schemas)
        self._attributes: Dict[str, Dict[str, AttributeDescriptor]] = {
            schema.lower(): {} for schema in self._schemas
        }
        for descriptor in attributes:
            schema_attrs = self._attributes.get(descriptor.namespace.lower())
            if schema_attrs is None:
                raise ValueError(
                    f"Attribute '{descriptor.name}' belongs to schema '{descriptor.namespace}', "
                    f"which resource type '{name}' does not declare"
                )
            schema_attrs[descriptor.name.lower()] = descriptor

    @property
    def name(self) -> str:
        return self._name

    @property
    def core_schema(self) -> str:
        return self._core_schema

    @property
    def schemas(self) -> List[str]:
        return list(self._schemas)

    def has_schema(self, namespace: str) -> bool:
        return namespace.lower() in self._attributes

    def canonical_schema(self, namespace: str) -> Optional[str]:
        """Return the declared spelling of ``namespace`` or None if it is not declared."""
        lower = namespace.lower()
        for schema in self._schemas:
            if schema.lower() == lower:
                return schema
        return None

    def get_attribute_descriptor(self, namespace: str, name: str) -> Optional[AttributeDescriptor]:
        """Case-insensitive lookup of an attribute in one of this resource's schemas."""
        schema_attrs = self._attributes.get(namespace.lower())
        if schema_attrs is None:
            return None
        return schema_attrs.get(name.lower())

    def get_attribute_descriptors(self, namespace: str) -> List[AttributeDescriptor]:
        return list(self._attributes.get(namespace.lower(), {}).values())

    @property
    def meta_descriptor(self) -> AttributeDescriptor:
        """The ``meta`` attribute of the core schema, which carries deletion paths.

        A core schema without ``meta.attributes`` is a broken registry, not
        something a caller can recover from.
        """
        meta = self.get_attribute_descriptor(self._core_schema, "meta")
        if meta is None or meta.get_sub_attribute("attributes") is None:
            raise AssertionError(
                f"Resource type '{self._name}' has no 'meta.attributes' descriptor "
                f"in schema '{self._core_schema}'"
            )
        return meta

    def __repr__(self):
        return f"ResourceDescriptor({self._name!r}, schemas={self._schemas!r})"

    @classmethod
    def from_schemas(
        cls, name: str, core_urn: str, extension_urns: Iterable[str] = ()
    ) -> "ResourceDescriptor":
        """Build a resource descriptor from registered schema URNs."""
        extension_urns = list(extension_urns)
        attributes: List[AttributeDescriptor] = []
        for urn in [core_urn] + extension_urns:
            schema = get_schema(urn)
            if schema is None:
                raise ValueError(f"Unknown schema URN: {urn}")
            for definition in schema["attributes"]:
                attributes.append(AttributeDescriptor.from_definition(definition, urn))
        return cls(name, core_urn, attributes, extension_urns)


@lru_cache(maxsize=None)
def _build_resource_descriptor(name: str) -> ResourceDescriptor:
    core_urn, extension_urns = RESOURCE_TYPES[name]
    return ResourceDescriptor.from_schemas(name, core_urn, extension_urns)


def get_resource_descriptor(name_or_urn: str) -> Optional[ResourceDescriptor]:
    """Get a registered resource descriptor by resource type name or core schema URN."""
    lower = name_or_urn.lower()
    for name, (core_urn, _) in RESOURCE_TYPES.items():
        if name.lower() == lower or core_urn.lower() == lower:
            return _build_resource_descriptor(name)
    return None


def detect_resource_descriptor(schemas: Iterable[str]) -> Optional[ResourceDescriptor]:
    """Determine the resource type from a payload's ``schemas`` array.

    The first core schema URN found wins; extension URNs alone do not
    identify a resource type.
    """
    core_urns = {core_urn.lower(): name for name, (core_urn, _) in RESOURCE_TYPES.items()}
    for urn in schemas:
        if not isinstance(urn, str):
            continue
        name = core_urns.get(urn.lower())
        if name is not None:
            return _build_resource_descriptor(name)
    return None

"""SCIM resources: an attribute tree bound to its resource descriptor.

``ScimResource.from_json`` turns a SCIM 2.0 JSON payload into an attribute
tree and ``to_json`` turns it back.  ``create_resource`` is the default
resource factory handed to the patch body builder: it checks that an
attribute tree is structurally consistent with its resource descriptor
before wrapping it.

Core schema attributes live at the top level of a payload; extension
attributes live in an object keyed by the extension's schema URN::

    {
      "schemas": ["urn:ietf:params:scim:schemas:core:2.0:User",
                  "urn:ietf:params:scim:schemas:extension:enterprise:2.0:User"],
      "userName": "bjensen",
      "urn:ietf:params:scim:schemas:extension:enterprise:2.0:User": {"department": "Tour"}
    }
"""

from typing import Any, Dict, List, Optional

from .descriptors import AttributeDescriptor, ResourceDescriptor, detect_resource_descriptor
from .model import ScimAttribute, ScimAttributeValue, ScimObject


_SCALAR_TYPES = (str, bool, int, float)


class InvalidResourceError(Exception):
    """An attribute tree does not fit its resource descriptor.

    Attributes:
        cause:  The underlying exception, if this error wraps one.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ScimResource:
    """A SCIM resource: descriptor plus attribute tree."""

    def __init__(self, resource_descriptor: ResourceDescriptor, scim_object: Optional[ScimObject] = None):
        self.resource_descriptor = resource_descriptor
        self.scim_object = scim_object if scim_object is not None else ScimObject()

    @classmethod
    def from_json(
        cls, data: Dict[str, Any], resource_descriptor: Optional[ResourceDescriptor] = None
    ) -> "ScimResource":
        """Build a resource from a SCIM JSON payload.

        Args:
            data:                 Parsed JSON object.
            resource_descriptor:  Resource type to read the payload as.  When
                                  omitted it is detected from ``schemas``.

        Raises:
            InvalidResourceError: if the resource type cannot be determined, an
                attribute is not declared by the resource's schemas, or a value
                has the wrong shape.
        """
        if not isinstance(data, dict):
            raise InvalidResourceError("SCIM resource must be a JSON object")

        if resource_descriptor is None:
            schemas = data.get("schemas")
            if not isinstance(schemas, list) or not schemas:
                raise InvalidResourceError("'schemas' must be a non-empty array")
            resource_descriptor = detect_resource_descriptor(schemas)
            if resource_descriptor is None:
                raise InvalidResourceError(
                    f"No known core schema URN in 'schemas': {', '.join(map(str, schemas))}"
                )

        scim_object = ScimObject()
        for key, value in data.items():
            if key == "schemas" or value is None:
                continue
            extension = resource_descriptor.canonical_schema(key)
            if extension is not None and extension != resource_descriptor.core_schema:
                if not isinstance(value, dict):
                    raise InvalidResourceError(
                        f"Extension schema '{key}' must be an object"
                    )
                for ext_key, ext_value in value.items():
                    _set_from_json(scim_object, resource_descriptor, extension, ext_key, ext_value)
            else:
                _set_from_json(scim_object, resource_descriptor, resource_descriptor.core_schema, key, value)

        return cls(resource_descriptor, scim_object)

    def to_json(self) -> Dict[str, Any]:
        """Serialize to a SCIM JSON payload.  ``schemas`` lists the core schema
        and every extension that has attributes."""
        descriptor = self.resource_descriptor
        core_key = descriptor.core_schema.lower()
        present = {schema.lower() for schema in self.scim_object.schemas}
        data: Dict[str, Any] = {
            "schemas": [
                schema for schema in descriptor.schemas
                if schema.lower() == core_key or schema.lower() in present
            ],
        }
        for schema in self.scim_object.schemas:
            if schema.lower() == core_key:
                target = data
            else:
                target = data.setdefault(descriptor.canonical_schema(schema) or schema, {})
            for attribute in self.scim_object.get_attributes(schema):
                target[attribute.name] = attribute_to_json(attribute)
        return data

    def __eq__(self, other):
        if not isinstance(other, ScimResource):
            return NotImplemented
        return (
            self.resource_descriptor is other.resource_descriptor
            and self.scim_object == other.scim_object
        )

    def __repr__(self):
        return f"ScimResource({self.resource_descriptor.name}, {self.scim_object!r})"


def create_resource(resource_descriptor: ResourceDescriptor, scim_object: ScimObject) -> ScimResource:
    """Default resource factory: check the tree against the descriptor and wrap it.

    Raises:
        InvalidResourceError: if an attribute's schema or name is not declared
            by the resource type, or a value's shape disagrees with its
            descriptor.
    """
    for attribute in scim_object:
        declared = resource_descriptor.get_attribute_descriptor(attribute.namespace, attribute.name)
        if declared is None:
            raise InvalidResourceError(
                f"Attribute '{attribute.name}' (schema: {attribute.namespace}) is not defined "
                f"for resource type '{resource_descriptor.name}'"
            )
        _check_values(attribute, attribute.name)
    return ScimResource(resource_descriptor, scim_object)


def attribute_to_json(attribute: ScimAttribute) -> Any:
    if attribute.descriptor.multi_valued:
        return [_value_to_json(value) for value in attribute.values]
    return _value_to_json(attribute.value)


def _value_to_json(value: ScimAttributeValue) -> Any:
    if value.is_complex:
        return {sub.name: attribute_to_json(sub) for sub in value.attributes.values()}
    return value.value


def _check_values(attribute: ScimAttribute, path: str) -> None:
    descriptor = attribute.descriptor
    for value in attribute.values:
        if value.is_complex != descriptor.is_complex:
            kind = "complex" if descriptor.is_complex else "simple"
            raise InvalidResourceError(f"Attribute '{path}' must have {kind} values")
        if not value.is_complex:
            continue
        for sub in value.attributes.values():
            if descriptor.get_sub_attribute(sub.name) is None:
                raise InvalidResourceError(f"Unknown sub-attribute '{sub.name}' in '{path}'")
            _check_values(sub, f"{path}.{sub.name}")


def _set_from_json(
    scim_object: ScimObject,
    resource_descriptor: ResourceDescriptor,
    schema: str,
    name: str,
    value: Any,
) -> None:
    descriptor = resource_descriptor.get_attribute_descriptor(schema, name)
    if descriptor is None:
        raise InvalidResourceError(
            f"Unknown attribute '{name}' (schema: {schema}) for resource type "
            f"'{resource_descriptor.name}'"
        )
    attribute = _attribute_from_json(descriptor, value, descriptor.name)
    if attribute is not None:
        scim_object.set_attribute(attribute)


def _attribute_from_json(descriptor: AttributeDescriptor, value: Any, path: str) -> Optional[ScimAttribute]:
    """Convert one JSON attribute; returns None for null.  An empty array is kept
    as a multi-valued attribute with no values."""
    if value is None:
        return None
    if descriptor.multi_valued:
        if not isinstance(value, list):
            raise InvalidResourceError(f"Attribute '{path}' must be an array (multiValued)")
        values = [
            _value_from_json(descriptor, item, f"{path}[{idx}]")
            for idx, item in enumerate(value)
            if item is not None
        ]
        return ScimAttribute(descriptor, values)
    if isinstance(value, list):
        raise InvalidResourceError(f"Attribute '{path}' is single-valued but got an array")
    return ScimAttribute.create(descriptor, _value_from_json(descriptor, value, path))


def _value_from_json(descriptor: AttributeDescriptor, item: Any, path: str) -> ScimAttributeValue:
    if descriptor.is_complex:
        if not isinstance(item, dict):
            raise InvalidResourceError(f"Attribute '{path}' must be an object (complex)")
        subs: List[ScimAttribute] = []
        for sub_name, sub_value in item.items():
            sub_descriptor = descriptor.get_sub_attribute(sub_name)
            if sub_descriptor is None:
                raise InvalidResourceError(f"Unknown sub-attribute '{sub_name}' in '{path}'")
            sub = _attribute_from_json(sub_descriptor, sub_value, f"{path}.{sub_descriptor.name}")
            if sub is not None:
                subs.append(sub)
        return ScimAttributeValue.create_complex(subs)
    if not isinstance(item, _SCALAR_TYPES):
        raise InvalidResourceError(f"Attribute '{path}' must be a {descriptor.data_type.value} value")
    return ScimAttributeValue.create_simple(item)

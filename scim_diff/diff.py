"""Computes the modifications that turn one SCIM resource into another.

``generate_diff(source, target)`` returns a ``Diff``: the attribute paths to
remove from the source and the attributes (with only their new or changed
parts) to write to it.  ``Diff.to_partial_resource()`` turns that into the
body of a PATCH request.

How attributes are compared:

- Attributes only in the source are removed.  Simple attributes are removed
  by path (``nickName``), single-valued complex attributes one
  sub-attribute at a time (``name.givenName``).  A multi-valued complex
  attribute is removed as a whole (``emails``) unless only some of its
  sub-attributes were selected, in which case each selected sub-attribute
  other than the normative ``type``, ``primary``, ``operation``, ``display``
  and ``value`` is removed.
- Attributes only in the target are written as they are, restricted to the
  selected sub-attributes.
- Single-valued complex attributes in both are compared sub-attribute by
  sub-attribute.
- Multi-valued attributes in both are compared as sets of whole values.
  Values that disappeared are written back with ``operation: "delete"``,
  new values are written as they are.  If the target keeps none of the
  source values and adds none either, the attribute is removed instead.

Values of multi-valued complex attributes are matched on their entire
content; an entry with one changed sub-attribute is a delete plus an add.
"""

import logging
from typing import Dict, List, Optional, Tuple

from .attribute_path import AttributePath
from .descriptors import AttributeDescriptor, NORMATIVE_SUB_ATTRIBUTES, ResourceDescriptor
from .model import ScimAttribute, ScimAttributeValue, ScimObject
from .patch_body import ResourceFactory, build_patch_body
from .resources import ScimResource, attribute_to_json, create_resource
from .selector import AttributeSelector

logger = logging.getLogger(__name__)


class Diff:
    """The result of ``generate_diff``.  Immutable.

    Attributes:
        resource_descriptor:   Resource type of the compared resources.
        attributes_to_delete:  Attribute paths to remove from the source, no duplicates.
        attributes_to_update:  Attributes to add or replace, adds first.
    """

    def __init__(
        self,
        resource_descriptor: ResourceDescriptor,
        attributes_to_delete=(),
        attributes_to_update=(),
    ):
        self._resource_descriptor = resource_descriptor
        self._attributes_to_delete: Tuple[str, ...] = tuple(attributes_to_delete)
        self._attributes_to_update: Tuple[ScimAttribute, ...] = tuple(attributes_to_update)

    @property
    def resource_descriptor(self) -> ResourceDescriptor:
        return self._resource_descriptor

    @property
    def attributes_to_delete(self) -> Tuple[str, ...]:
        return self._attributes_to_delete

    @property
    def attributes_to_update(self) -> Tuple[ScimAttribute, ...]:
        return self._attributes_to_update

    @property
    def is_empty(self) -> bool:
        return not self._attributes_to_delete and not self._attributes_to_update

    def to_partial_resource(self, resource_factory: ResourceFactory = create_resource):
        """Build the PATCH request body for this diff.  See ``build_patch_body``."""
        return build_patch_body(self, resource_factory)

    def to_json(self) -> Dict[str, object]:
        """Report form: deletion paths and update values keyed by attribute path."""
        core = self._resource_descriptor.core_schema
        return {
            "attributesToDelete": list(self._attributes_to_delete),
            "attributesToUpdate": {
                str(AttributePath(a.namespace, a.name, default_schema=core)): attribute_to_json(a)
                for a in self._attributes_to_update
            },
        }

    def __repr__(self):
        return (
            f"Diff(attributes_to_delete={list(self._attributes_to_delete)!r}, "
            f"attributes_to_update={list(self._attributes_to_update)!r})"
        )


def generate_diff(
    source: ScimResource,
    target: ScimResource,
    *attributes: str,
    selector: Optional[AttributeSelector] = None,
) -> Diff:
    """Generate the modifications that make ``source`` match ``target``.

    Args:
        source:      The resource as it is now.
        target:      The resource as it should be after the PATCH.
        attributes:  Attribute paths to compare (e.g. ``name.givenName``).
                     Paths without a schema prefix belong to the resource's
                     core schema.  With none, every attribute is compared.
        selector:    A prebuilt selector, instead of ``attributes``.

    Raises:
        ParseError: if an attribute path is malformed.
        ValueError: if the resources are of different types, or both
            ``attributes`` and ``selector`` are given.
    """
    descriptor = source.resource_descriptor
    if descriptor.core_schema.lower() != target.resource_descriptor.core_schema.lower():
        raise ValueError(
            f"Cannot diff a {descriptor.name} against a {target.resource_descriptor.name}"
        )
    if selector is None:
        selector = AttributeSelector.from_strings(attributes, descriptor.core_schema)
    elif attributes:
        raise ValueError("Pass attribute paths or a selector, not both")

    builder = _DiffBuilder(descriptor, selector)
    builder.compare(source.scim_object, target.scim_object)
    logger.debug(
        "Generated %s diff: %d attribute(s) to delete, %d to update",
        descriptor.name, len(builder.deletions), len(builder.updates),
    )
    return Diff(descriptor, builder.deletions, builder.updates)


class _DiffBuilder:
    """Accumulates deletion paths and update attributes for one ``generate_diff`` call."""

    def __init__(self, resource_descriptor: ResourceDescriptor, selector: AttributeSelector):
        self.default_schema = resource_descriptor.core_schema
        self.selector = selector
        # dict as an insertion-ordered set
        self.deletions: Dict[str, None] = {}
        self.updates: List[ScimAttribute] = []

    def compare(self, source: ScimObject, target: ScimObject) -> None:
        source_attrs = self._selected(source)
        target_attrs = self._selected(target)

        source_only = [a for key, a in source_attrs.items() if key not in target_attrs]
        target_only = [a for key, a in target_attrs.items() if key not in source_attrs]
        common = [(a, target_attrs[key]) for key, a in source_attrs.items() if key in target_attrs]
        logger.debug(
            "Partitioned attributes: %d source-only, %d target-only, %d common",
            len(source_only), len(target_only), len(common),
        )

        for attribute in source_only:
            self._delete_attribute(attribute)

        for attribute in target_only:
            self._add_attribute(attribute)

        for source_attribute, target_attribute in common:
            if source_attribute == target_attribute:
                continue
            descriptor = source_attribute.descriptor
            if descriptor.multi_valued:
                self._diff_multi_valued(source_attribute, target_attribute)
            elif descriptor.is_complex:
                self._diff_complex(source_attribute, target_attribute)
            else:
                self.updates.append(target_attribute)

    # -- Helpers -------------------------------------------------------------

    def _selected(self, scim_object: ScimObject) -> Dict[Tuple[str, str], ScimAttribute]:
        return {
            attribute.key(): attribute
            for attribute in scim_object
            if self.selector.matches(attribute.namespace, attribute.name)
        }

    def _delete_path(self, attribute: ScimAttribute, sub_name: Optional[str] = None) -> None:
        path = AttributePath(attribute.namespace, attribute.name, sub_name, self.default_schema)
        self.deletions[str(path)] = None

    def _filter_sub_attributes(
        self, attribute: ScimAttribute, value: ScimAttributeValue
    ) -> Dict[str, ScimAttribute]:
        """Sub-attributes of a complex value that the selector lets through, keyed by lower-cased name."""
        return {
            key: sub
            for key, sub in value.attributes.items()
            if self.selector.matches_sub_attribute(attribute.namespace, attribute.name, sub.name)
        }

    def _filtered_value(
        self, attribute: ScimAttribute, value: ScimAttributeValue
    ) -> Optional[ScimAttributeValue]:
        subs = self._filter_sub_attributes(attribute, value)
        if not subs:
            return None
        return ScimAttributeValue.create_complex(subs.values())

    # -- Source only ---------------------------------------------------------

    def _delete_attribute(self, attribute: ScimAttribute) -> None:
        descriptor = attribute.descriptor
        if not descriptor.is_complex:
            self._delete_path(attribute)
            return

        if descriptor.multi_valued:
            if not self.selector.filters_sub_attributes(attribute.namespace, attribute.name):
                self._delete_path(attribute)
                return
            for value in attribute.values:
                for key, sub in self._filter_sub_attributes(attribute, value).items():
                    # Removing the entry removes these; they cannot be removed on their own
                    if key in NORMATIVE_SUB_ATTRIBUTES:
                        continue
                    self._delete_path(attribute, sub.name)
            return

        subs = self._filter_sub_attributes(attribute, attribute.value)
        if not subs and not self.selector.filters_sub_attributes(attribute.namespace, attribute.name):
            # an empty complex value
            self._delete_path(attribute)
            return
        for sub in subs.values():
            self._delete_path(attribute, sub.name)

    # -- Target only ---------------------------------------------------------

    def _add_attribute(self, attribute: ScimAttribute) -> None:
        descriptor = attribute.descriptor
        if not descriptor.is_complex:
            if attribute.values:
                self.updates.append(attribute)
            return

        values = []
        for value in attribute.values:
            filtered = self._filtered_value(attribute, value)
            if filtered is not None:
                values.append(filtered)
        if values:
            self.updates.append(ScimAttribute(descriptor, values))

    # -- In both -------------------------------------------------------------

    def _diff_multi_valued(self, source: ScimAttribute, target: ScimAttribute) -> None:
        descriptor = source.descriptor
        source_values = dict.fromkeys(source.values)
        target_values = dict.fromkeys(target.values)
        removed = [v for v in source_values if v not in target_values]
        added = [v for v in target_values if v not in source_values]

        if removed and not added and len(removed) == len(source_values):
            logger.debug("All values of '%s' removed; deleting the attribute", source.name)
            self._delete_attribute(source)
            return

        if not descriptor.is_complex:
            # Simple values cannot carry a delete marker: remove the attribute
            # and write back the full target list
            if removed:
                self._delete_path(source)
                self.updates.append(target)
            elif added:
                self.updates.append(ScimAttribute(descriptor, added))
            return

        patch_values = []
        for value in removed:
            subs = self._filter_sub_attributes(source, value)
            if not subs:
                continue
            operation = _delete_marker(descriptor)
            subs[operation.name.lower()] = operation
            patch_values.append(ScimAttributeValue.create_complex(subs.values()))
        for value in added:
            filtered = self._filtered_value(target, value)
            if filtered is not None:
                patch_values.append(filtered)

        if patch_values:
            self.updates.append(ScimAttribute(descriptor, patch_values))

    def _diff_complex(self, source: ScimAttribute, target: ScimAttribute) -> None:
        source_value = source.value
        target_value = target.value

        for key, sub in self._filter_sub_attributes(source, source_value).items():
            if not target_value.has_attribute(key):
                self._delete_path(source, sub.name)

        changed = [
            sub
            for key, sub in self._filter_sub_attributes(target, target_value).items()
            if source_value.get_attribute(key) != sub
        ]
        if changed:
            self.updates.append(
                ScimAttribute.create(target.descriptor, ScimAttributeValue.create_complex(changed))
            )


def _delete_marker(descriptor: AttributeDescriptor) -> ScimAttribute:
    """The ``operation: "delete"`` sub-attribute marking a value for removal.

    Every multi-valued complex descriptor must define ``operation``; one that
    does not is a broken schema registry and would otherwise produce a PATCH
    that silently keeps the value.
    """
    operation = descriptor.get_sub_attribute("operation")
    if operation is None:
        raise AssertionError(
            f"Multi-valued attribute '{descriptor.name}' (schema: {descriptor.namespace}) "
            f"has no 'operation' sub-attribute descriptor"
        )
    return ScimAttribute.create(operation, ScimAttributeValue.create_simple("delete"))

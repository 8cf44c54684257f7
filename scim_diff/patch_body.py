"""Turns a diff into the body of a PATCH request.

The body is a partial resource: attribute paths to remove are listed in
``meta.attributes``, attributes to add or replace follow as ordinary
attributes.  For the emails example (``b@x.com`` replaced by ``c@x.com``,
``nickName`` removed)::

    {
      "schemas": ["urn:ietf:params:scim:schemas:core:2.0:User"],
      "meta": {"attributes": ["nickName"]},
      "emails": [
        {"value": "b@x.com", "type": "home", "operation": "delete"},
        {"value": "c@x.com", "type": "home"}
      ]
    }

Read-only attributes are left out: a server would reject them.
"""

import logging
from typing import Any, Callable, Optional

from .descriptors import ResourceDescriptor
from .model import ScimAttribute, ScimAttributeValue, ScimObject
from .resources import InvalidResourceError, create_resource

logger = logging.getLogger(__name__)


# (resource descriptor, attribute tree) -> resource
ResourceFactory = Callable[[ResourceDescriptor, ScimObject], Any]


def build_patch_body(
    diff,
    resource_factory: ResourceFactory = create_resource,
    resource_descriptor: Optional[ResourceDescriptor] = None,
):
    """Assemble the PATCH body for ``diff`` and hand it to ``resource_factory``.

    Args:
        diff:                 A ``Diff`` from ``generate_diff``.
        resource_factory:     Builds the resource from the assembled attribute
                              tree; ``create_resource`` by default.
        resource_descriptor:  Resource type of the body; defaults to the
                              diff's own.

    Raises:
        InvalidResourceError: if the factory rejects the attribute tree.  Any
            other exception from the factory is wrapped, with the original as
            its cause.
    """
    descriptor = resource_descriptor or diff.resource_descriptor
    scim_object = ScimObject()

    if diff.attributes_to_delete:
        meta = descriptor.meta_descriptor
        paths = ScimAttribute(
            meta.get_sub_attribute("attributes"),
            [ScimAttributeValue.create_simple(path) for path in diff.attributes_to_delete],
        )
        scim_object.set_attribute(
            ScimAttribute.create(meta, ScimAttributeValue.create_complex([paths]))
        )

    for attribute in diff.attributes_to_update:
        if attribute.descriptor.read_only:
            logger.debug("Leaving read-only attribute '%s' out of the PATCH body", attribute.name)
            continue
        scim_object.set_attribute(attribute)

    try:
        return resource_factory(descriptor, scim_object)
    except InvalidResourceError:
        raise
    except Exception as e:
        raise InvalidResourceError(f"Could not create {descriptor.name} PATCH body: {e}", cause=e) from e

"""scim-diff: Generate SCIM PATCH modifications from two versions of a resource.

Compares a source and a target SCIM resource, optionally restricted to a set
of attribute paths, and produces the attribute paths to remove plus the
attributes to add or replace, ready to be sent as a partial resource in a
PATCH request.
"""

__version__ = "0.1.0"

from .attribute_path import AttributePath, ParseError
from .descriptors import AttributeDescriptor, DataType, ResourceDescriptor, get_resource_descriptor
from .diff import Diff, generate_diff
from .model import ScimAttribute, ScimAttributeValue, ScimObject
from .patch_body import build_patch_body
from .resources import InvalidResourceError, ScimResource, create_resource
from .selector import AttributeSelector

__all__ = [
    "AttributeDescriptor",
    "AttributePath",
    "AttributeSelector",
    "DataType",
    "Diff",
    "InvalidResourceError",
    "ParseError",
    "ResourceDescriptor",
    "ScimAttribute",
    "ScimAttributeValue",
    "ScimObject",
    "ScimResource",
    "build_patch_body",
    "create_resource",
    "generate_diff",
    "get_resource_descriptor",
]

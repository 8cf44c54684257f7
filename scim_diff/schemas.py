"""SCIM 2.0 core and enterprise extension schemas (RFC 7643) used by the descriptor registry.

Only the keys the diff engine consults are kept: ``name``, ``type``,
``multiValued``, ``required``, ``mutability`` and ``subAttributes``.

``meta`` carries one attribute that RFC 7643 does not define: ``attributes``,
a multi-valued string listing attribute paths to remove from the target
resource before the rest of a PATCH body is applied.
"""

CORE_USER_URN = "urn:ietf:params:scim:schemas:core:2.0:User"
CORE_GROUP_URN = "urn:ietf:params:scim:schemas:core:2.0:Group"
ENTERPRISE_USER_URN = "urn:ietf:params:scim:schemas:extension:enterprise:2.0:User"
CORE_AGENT_URN = "urn:ietf:params:scim:schemas:core:2.0:Agent"
CORE_AGENTIC_APPLICATION_URN = "urn:ietf:params:scim:schemas:core:2.0:AgenticApplication"


def _rw(name, type_="string", **extra):
    definition = {"name": name, "type": type_, "mutability": "readWrite"}
    definition.update(extra)
    return definition


def _ro(name, type_="string", **extra):
    definition = {"name": name, "type": type_, "mutability": "readOnly"}
    definition.update(extra)
    return definition


# Shared by every core schema.  ``attributes`` is writable so a PATCH body
# may carry it even though the rest of ``meta`` is server-managed.
META_ATTRIBUTE = _ro("meta", "complex", subAttributes=[
    _ro("resourceType"),
    _ro("created", "dateTime"),
    _ro("lastModified", "dateTime"),
    _ro("location", "reference"),
    _ro("version"),
    _rw("attributes", multiValued=True),
])

ID_ATTRIBUTE = _ro("id")
EXTERNAL_ID_ATTRIBUTE = _rw("externalId")

# Sub-attributes of a plain multi-valued "reference to something" entry
_MULTI_VALUED_ENTRY = [
    _rw("value"),
    _rw("display"),
    _rw("type"),
    _rw("primary", "boolean"),
]

_READ_ONLY_REFERENCE = [
    _ro("value"),
    _ro("$ref", "reference"),
    _ro("display"),
    _ro("type"),
]

# Core User schema (RFC 7643 section 4.1)
CORE_USER_SCHEMA = {
    "id": CORE_USER_URN,
    "name": "User",
    "description": "User Account",
    "attributes": [
        _rw("userName", required=True),
        _rw("name", "complex", subAttributes=[
            _rw("formatted"),
            _rw("familyName"),
            _rw("givenName"),
            _rw("middleName"),
            _rw("honorificPrefix"),
            _rw("honorificSuffix"),
        ]),
        _rw("displayName"),
        _rw("nickName"),
        _rw("profileUrl", "reference"),
        _rw("title"),
        _rw("userType"),
        _rw("preferredLanguage"),
        _rw("locale"),
        _rw("timezone"),
        _rw("active", "boolean"),
        {"name": "password", "type": "string", "mutability": "writeOnly"},
        _rw("emails", "complex", multiValued=True, subAttributes=list(_MULTI_VALUED_ENTRY)),
        _rw("phoneNumbers", "complex", multiValued=True, subAttributes=list(_MULTI_VALUED_ENTRY)),
        _rw("ims", "complex", multiValued=True, subAttributes=list(_MULTI_VALUED_ENTRY)),
        _rw("photos", "complex", multiValued=True, subAttributes=[
            _rw("value", "reference"),
            _rw("display"),
            _rw("type"),
            _rw("primary", "boolean"),
        ]),
        _rw("addresses", "complex", multiValued=True, subAttributes=[
            _rw("formatted"),
            _rw("streetAddress"),
            _rw("locality"),
            _rw("region"),
            _rw("postalCode"),
            _rw("country"),
            _rw("type"),
            _rw("primary", "boolean"),
        ]),
        _ro("groups", "complex", multiValued=True, subAttributes=list(_READ_ONLY_REFERENCE)),
        _rw("entitlements", "complex", multiValued=True, subAttributes=list(_MULTI_VALUED_ENTRY)),
        _rw("roles", "complex", multiValued=True, subAttributes=list(_MULTI_VALUED_ENTRY)),
        _rw("x509Certificates", "complex", multiValued=True, subAttributes=[
            _rw("value", "binary"),
            _rw("display"),
            _rw("type"),
            _rw("primary", "boolean"),
        ]),
        ID_ATTRIBUTE,
        EXTERNAL_ID_ATTRIBUTE,
        META_ATTRIBUTE,
    ],
}

# Core Group schema (RFC 7643 section 4.2)
CORE_GROUP_SCHEMA = {
    "id": CORE_GROUP_URN,
    "name": "Group",
    "description": "Group",
    "attributes": [
        _rw("displayName", required=True),
        _rw("members", "complex", multiValued=True, subAttributes=[
            _rw("value"),
            _ro("$ref", "reference"),
            _rw("type"),
            _rw("display"),
        ]),
        ID_ATTRIBUTE,
        EXTERNAL_ID_ATTRIBUTE,
        META_ATTRIBUTE,
    ],
}

# Enterprise User extension (RFC 7643 section 4.3)
ENTERPRISE_USER_SCHEMA = {
    "id": ENTERPRISE_USER_URN,
    "name": "EnterpriseUser",
    "description": "Enterprise User",
    "attributes": [
        _rw("employeeNumber"),
        _rw("costCenter"),
        _rw("organization"),
        _rw("division"),
        _rw("department"),
        _rw("manager", "complex", subAttributes=[
            _rw("value"),
            _ro("$ref", "reference"),
            _rw("displayName"),
        ]),
    ],
}

# Agent schema (draft-abbey-scim-agent-extension-00)
#
# Ownership, group membership, application links and the agent's parent are
# managed by the server, so they are read-only here and never end up in a
# PATCH body.
CORE_AGENT_SCHEMA = {
    "id": CORE_AGENT_URN,
    "name": "Agent",
    "description": "An AI agent",
    "attributes": [
        _rw("name", required=True),
        _rw("displayName"),
        _rw("agentType"),
        _rw("active", "boolean"),
        _rw("description"),
        _ro("subject"),
        _ro("groups", "complex", multiValued=True, subAttributes=list(_READ_ONLY_REFERENCE)),
        _rw("entitlements", "complex", multiValued=True, subAttributes=list(_MULTI_VALUED_ENTRY)),
        _rw("roles", "complex", multiValued=True, subAttributes=list(_MULTI_VALUED_ENTRY)),
        _ro("applications", "complex", multiValued=True, subAttributes=[
            _ro("value"),
            _ro("$ref", "reference"),
            _ro("display"),
        ]),
        _ro("owners", "complex", multiValued=True, subAttributes=[
            _ro("value"),
            _ro("$ref", "reference"),
            _ro("display"),
        ]),
        _ro("parent", "complex", subAttributes=[
            _ro("value"),
            _ro("$ref", "reference"),
            _ro("display"),
        ]),
        ID_ATTRIBUTE,
        EXTERNAL_ID_ATTRIBUTE,
        META_ATTRIBUTE,
    ],
}

# AgenticApplication schema (draft-abbey-scim-agent-extension-00)
CORE_AGENTIC_APPLICATION_SCHEMA = {
    "id": CORE_AGENTIC_APPLICATION_URN,
    "name": "AgenticApplication",
    "description": "An agentic application",
    "attributes": [
        _rw("name", required=True),
        _rw("displayName"),
        _rw("description"),
        _rw("active", "boolean"),
        ID_ATTRIBUTE,
        EXTERNAL_ID_ATTRIBUTE,
        META_ATTRIBUTE,
    ],
}

# Schema registry
# Maps SCIM schema URNs to their schema definitions.
SCHEMAS = {
    CORE_USER_URN: CORE_USER_SCHEMA,
    CORE_GROUP_URN: CORE_GROUP_SCHEMA,
    ENTERPRISE_USER_URN: ENTERPRISE_USER_SCHEMA,
    CORE_AGENT_URN: CORE_AGENT_SCHEMA,
    CORE_AGENTIC_APPLICATION_URN: CORE_AGENTIC_APPLICATION_SCHEMA,
}

# Resource types: name -> (core schema URN, extension schema URNs)
RESOURCE_TYPES = {
    "User": (CORE_USER_URN, [ENTERPRISE_USER_URN]),
    "Group": (CORE_GROUP_URN, []),
    "Agent": (CORE_AGENT_URN, []),
    "AgenticApplication": (CORE_AGENTIC_APPLICATION_URN, []),
}


def get_schema(urn: str):
    """Get schema definition by URN (case-insensitive)."""
    schema = SCHEMAS.get(urn)
    if schema is not None:
        return schema
    lower = urn.lower()
    for key, value in SCHEMAS.items():
        if key.lower() == lower:
            return value
    return None

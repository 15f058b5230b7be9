"""
Shared utilities for the output generators.
Handles convention/mode selection, namespace resolution and serialisation of
the composed schema into the embedded data literal.
"""
import json
from enum import Enum
from typing import Optional

from proto_ast import ProtoSchema
from proto_errors import NamespaceError, RenderError
from namespace_validator import is_valid_namespace


class Convention(Enum):
    STRUCTURAL = "json"
    ASSIGNMENT_SHIM = "shim"
    MODULE_EXPORT = "commonjs"
    ASYNC_MODULE_DEFINE = "amd"


class RenderMode(Enum):
    PRETTY = "pretty"
    COMPACT = "compact"


class _DeriveNamespace:
    def __repr__(self):
        return "DERIVE_NAMESPACE"


# Use the schema's own package as the namespace, or none if it declares no package
DERIVE_NAMESPACE = _DeriveNamespace()

PRETTY_INDENT = 4


def resolve_namespace(schema: ProtoSchema, namespace) -> Optional[str]:
    """
    Turn the requested namespace into the concrete string the build call uses.
    Raises NamespaceError when it is not a legal path within the schema.
    """
    if namespace is DERIVE_NAMESPACE:
        namespace = schema.package or None
    if namespace is None:
        return None
    if not is_valid_namespace(namespace, schema):
        raise NamespaceError(namespace)
    return namespace


def serialize_literal(schema: ProtoSchema, mode: RenderMode) -> str:
    """Serialise the composed schema into a JSON literal."""
    try:
        data = schema.to_dict()
        if mode is RenderMode.COMPACT:
            return json.dumps(data, separators=(",", ":"))
        return json.dumps(data, indent=PRETTY_INDENT)
    except (TypeError, ValueError) as e:
        raise RenderError(f"Composed schema could not be serialised: {e}") from e


def builder_expression(library: str, literal: str, namespace: Optional[str]) -> str:
    """The runtime-library call that imports the literal and builds it under `namespace`."""
    build_arg = json.dumps(namespace) if namespace is not None else ""
    return f"{library}.newBuilder({{}})['import']({literal}).build({build_arg})"


def namespace_segments(namespace: str):
    """Split a namespace into its parts, dropping a single leading dot."""
    if namespace.startswith("."):
        namespace = namespace[1:]
    return namespace.split(".")

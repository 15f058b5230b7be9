"""
Output projection: picks the generator for a convention and feeds it the
resolved namespace and the serialised schema literal.
"""
from typing import Optional

from proto_ast import ProtoSchema
from generators.generator_utils import (
    Convention,
    RenderMode,
    resolve_namespace,
    serialize_literal,
)
from generators.json_generator import generate_structural
from generators.js_module_generator import generate_shim, generate_commonjs, generate_amd

WRAPPING_GENERATORS = {
    Convention.ASSIGNMENT_SHIM: generate_shim,
    Convention.MODULE_EXPORT: generate_commonjs,
    Convention.ASYNC_MODULE_DEFINE: generate_amd,
}


def render(schema: ProtoSchema, convention: Convention, namespace=None,
           mode: RenderMode = RenderMode.PRETTY) -> str:
    """
    Render a composed schema. `namespace` may be a dotted string, None, or
    DERIVE_NAMESPACE; the structural convention ignores it.
    """
    if convention is Convention.STRUCTURAL:
        return generate_structural(schema, mode)
    generator = WRAPPING_GENERATORS[convention]
    resolved: Optional[str] = resolve_namespace(schema, namespace)
    literal = serialize_literal(schema, mode)
    return generator(literal, resolved, mode)

"""
Structural generator: writes the composed schema as a plain JSON document.
"""
from proto_ast import ProtoSchema
from generators.generator_utils import RenderMode, serialize_literal


def generate_structural(schema: ProtoSchema, mode: RenderMode = RenderMode.PRETTY) -> str:
    return serialize_literal(schema, mode) + "\n"

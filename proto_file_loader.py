# proto_file_loader.py
# Reads .proto files and turns their lark parse trees into ProtoSchema nodes.
import os
import re
from typing import Optional

from lark import Transformer, v_args

from lark_parser import parse_proto
from proto_errors import ProtoParseError
from proto_ast import (
    ProtoSchema,
    ProtoMessage,
    ProtoField,
    ProtoEnum,
    ProtoEnumValue,
    ProtoService,
    ProtoRpc,
)

# Upper bound of the field number space, used for 'extensions N to max'
MAX_FIELD_ID = 0x1FFFFFFF

# Imports that name the runtime library's own descriptor rather than a user schema
LIBRARY_INTERNAL_IMPORTS = {
    "google/protobuf/descriptor.proto",
}


def is_valid_import_reference(import_ref: str) -> bool:
    """Whether an import string names a schema that should be resolved and inlined."""
    if not import_ref or not import_ref.strip():
        return False
    return import_ref.replace("\\", "/") not in LIBRARY_INTERNAL_IMPORTS


_SIMPLE_ESCAPES = {
    "a": "\a", "b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v",
    "\\": "\\", "'": "'", '"': '"', "?": "?",
}

_ESCAPE = re.compile(r"\\([xX][0-9A-Fa-f]{1,2}|[0-7]{1,3}|.)", re.DOTALL)


def _unescape(match) -> str:
    escape = match.group(1)
    if escape[0] in "xX" and len(escape) > 1:
        return chr(int(escape[1:], 16))
    if escape[0] in "01234567":
        return chr(int(escape, 8))
    if escape in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[escape]
    # Unknown escapes keep the character itself
    return escape


def _unquote(token) -> str:
    return _ESCAPE.sub(_unescape, str(token)[1:-1])


def _parse_int(text: str) -> int:
    text = str(text)
    sign = -1 if text.startswith("-") else 1
    digits = text.lstrip("+-")
    if digits[:2] in ("0x", "0X"):
        value = int(digits, 16)
    elif len(digits) > 1 and digits.startswith("0"):
        value = int(digits, 8)
    else:
        value = int(digits)
    return sign * value


@v_args(inline=True)
class ProtoTreeBuilder(Transformer):
    """
    Bottom-up transform of the lark tree. Statements come back as (kind, value)
    pairs so the enclosing rule can sort them into the right container.
    """

    # --- constants ---
    def int_const(self, token):
        return _parse_int(token)

    def float_const(self, token):
        return float(str(token))

    def string_const(self, token):
        return _unquote(token)

    def ident_const(self, token):
        text = str(token)
        if text == "true":
            return True
        if text == "false":
            return False
        return text

    # --- options ---
    def option_stmt(self, name, value):
        return ("option", (str(name), value))

    def field_option(self, name, value):
        return (str(name), value)

    def field_options(self, *options):
        return dict(options)

    # --- file level ---
    def empty_stmt(self):
        return None

    def syntax_stmt(self, token):
        return ("syntax", _unquote(token))

    def package_stmt(self, token):
        return ("package", str(token))

    def import_stmt(self, kind, path):
        return ("import", _unquote(path))

    # --- messages ---
    def field(self, label, type_ref, name, field_id, options):
        rule = str(label) if label is not None else "optional"
        return ("field", ProtoField(rule, str(type_ref), str(name), _parse_int(field_id), options))

    def map_field(self, key_type, value_type, name, field_id, options):
        return ("field", ProtoField("map", str(value_type), str(name), _parse_int(field_id), options,
                                    keytype=str(key_type)))

    def oneof_field(self, type_ref, name, field_id, options):
        return ProtoField("optional", str(type_ref), str(name), _parse_int(field_id), options)

    def oneof_def(self, name, *items):
        fields = [item for item in items if isinstance(item, ProtoField)]
        for field in fields:
            field.oneof = str(name)
        return ("oneof", (str(name), fields))

    def id_range(self, start, end):
        first = _parse_int(start)
        if end is None:
            return [first, first]
        if str(end) == "max":
            return [first, MAX_FIELD_ID]
        return [first, _parse_int(end)]

    def reserved_stmt(self, *items):
        return ("reserved", None)

    def extensions_stmt(self, id_range, options):
        return ("extensions", id_range)

    def message_def(self, name, *items):
        message = ProtoMessage(str(name))
        for item in items:
            if item is None:
                continue
            kind, value = item
            if kind == "field":
                message.fields.append(value)
            elif kind == "message":
                message.messages.append(value)
            elif kind == "enum":
                message.enums.append(value)
            elif kind == "option":
                message.options[value[0]] = value[1]
            elif kind == "oneof":
                oneof_name, fields = value
                message.fields.extend(fields)
                message.oneofs[oneof_name] = [f.id for f in fields]
            elif kind == "extensions":
                message.extensions = value
            # 'reserved' only constrains field numbers, nothing to keep
        return ("message", message)

    # --- enums ---
    def enum_value(self, name, value_id, options):
        return ("value", ProtoEnumValue(str(name), _parse_int(value_id), options))

    def enum_def(self, name, *items):
        enum = ProtoEnum(str(name), [])
        for item in items:
            if item is None:
                continue
            kind, value = item
            if kind == "value":
                enum.values.append(value)
            elif kind == "option":
                enum.options[value[0]] = value[1]
        return ("enum", enum)

    # --- services ---
    def rpc_body(self, *items):
        return dict(item[1] for item in items if item is not None)

    def rpc_def(self, name, request_stream, request, response_stream, response, options):
        return ("rpc", ProtoRpc(str(name), str(request), str(response),
                                request_stream=request_stream is not None,
                                response_stream=response_stream is not None,
                                options=options))

    def service_def(self, name, *items):
        service = ProtoService(str(name))
        for item in items:
            if item is None:
                continue
            kind, value = item
            if kind == "rpc":
                service.rpcs.append(value)
            elif kind == "option":
                service.options[value[0]] = value[1]
        return ("service", service)

    def start(self, *items):
        schema = ProtoSchema()
        for item in items:
            if item is None:
                continue
            kind, value = item
            if kind == "syntax":
                schema.syntax = value
            elif kind == "package":
                schema.package = value
            elif kind == "import":
                schema.imports.append(value)
            elif kind == "option":
                schema.options[value[0]] = value[1]
            elif kind == "message":
                schema.messages.append(value)
            elif kind == "enum":
                schema.enums.append(value)
            elif kind == "service":
                schema.services.append(value)
        return schema


def build_schema_from_lark_tree(tree, source_file: Optional[str] = None) -> ProtoSchema:
    schema = ProtoTreeBuilder().transform(tree)
    schema.file = source_file
    return schema


def parse_proto_text(text: str, source_file: Optional[str] = None) -> ProtoSchema:
    tree = parse_proto(text, source_file)
    return build_schema_from_lark_tree(tree, source_file)


def load_proto_file(proto_file_path: str) -> ProtoSchema:
    """Read a .proto file and return its (uncomposed) ProtoSchema."""
    abs_path = os.path.abspath(proto_file_path)
    try:
        with open(abs_path, 'r', encoding='utf-8') as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise ProtoParseError(f"Not valid UTF-8: {e}", file=abs_path) from e
    return parse_proto_text(text, abs_path)

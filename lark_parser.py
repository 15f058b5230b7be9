from lark import Lark
from lark.exceptions import UnexpectedInput

from proto_errors import ProtoParseError


# Grammar for proto2/proto3 schema files
grammar = r"""
    start: statement*

    ?statement: syntax_stmt
        | package_stmt
        | import_stmt
        | option_stmt
        | message_def
        | enum_def
        | service_def
        | empty_stmt

    empty_stmt: ";"
    syntax_stmt: "syntax" "=" STRING ";"
    package_stmt: "package" FULL_IDENT ";"
    import_stmt: "import" [IMPORT_KIND] STRING ";"
    option_stmt: "option" OPTION_NAME "=" constant ";"

    message_def: "message" IDENT "{" message_item* "}"
    ?message_item: field
        | map_field
        | oneof_def
        | message_def
        | enum_def
        | option_stmt
        | reserved_stmt
        | extensions_stmt
        | empty_stmt

    field: [LABEL] TYPE_REF IDENT "=" INT [field_options] ";"
    map_field: "map" "<" TYPE_REF "," TYPE_REF ">" IDENT "=" INT [field_options] ";"
    field_options: "[" field_option ("," field_option)* "]"
    field_option: OPTION_NAME "=" constant

    oneof_def: "oneof" IDENT "{" oneof_item* "}"
    ?oneof_item: oneof_field | option_stmt | empty_stmt
    oneof_field: TYPE_REF IDENT "=" INT [field_options] ";"

    reserved_stmt: "reserved" reserved_item ("," reserved_item)* ";"
    ?reserved_item: id_range | STRING
    extensions_stmt: "extensions" id_range [field_options] ";"
    id_range: INT ["to" (INT | MAX)]

    enum_def: "enum" IDENT "{" enum_item* "}"
    ?enum_item: enum_value | option_stmt | reserved_stmt | empty_stmt
    enum_value: IDENT "=" SIGNED_INT [field_options] ";"

    service_def: "service" IDENT "{" service_item* "}"
    ?service_item: rpc_def | option_stmt | empty_stmt
    rpc_def: "rpc" IDENT "(" [STREAM] TYPE_REF ")" "returns" "(" [STREAM] TYPE_REF ")" rpc_body
    rpc_body: ";"
        | "{" rpc_body_item* "}"
    ?rpc_body_item: option_stmt | empty_stmt

    ?constant: FLOAT -> float_const
        | SIGNED_SPECIAL -> ident_const
        | SIGNED_INT -> int_const
        | STRING -> string_const
        | FULL_IDENT -> ident_const

    LABEL: /(required|optional|repeated)\b/
    STREAM: /stream\b/
    IMPORT_KIND: "public" | "weak"
    MAX: "max"
    SIGNED_SPECIAL: /[+-](inf|nan)\b/

    IDENT: /[A-Za-z_][A-Za-z0-9_]*/
    FULL_IDENT: /[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*/
    // A type reference may be fully qualified with a leading dot, never a keyword
    TYPE_REF: /\.?(?!(?:message|enum|service|option|oneof|map|reserved|extensions|extend|required|optional|repeated)\b)[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*/
    OPTION_NAME: /(\(\.?[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*\)|[A-Za-z_][A-Za-z0-9_]*)(\.[A-Za-z_][A-Za-z0-9_]*)*/

    INT: /0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*/
    SIGNED_INT: /[+-]?(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)/
    FLOAT: /[+-]?([0-9]+\.[0-9]*([eE][+-]?[0-9]+)?|[0-9]+[eE][+-]?[0-9]+|\.[0-9]+([eE][+-]?[0-9]+)?)/
    STRING: /"(\\.|[^"\\\n])*"|'(\\.|[^'\\\n])*'/

    LINE_COMMENT: /\/\/[^\n]*/
    C_COMMENT: /\/\*[\s\S]*?\*\//

    %import common.WS
    %ignore WS
    %ignore LINE_COMMENT
    %ignore C_COMMENT
"""

parser = Lark(
    grammar,
    start='start',
    maybe_placeholders=True,
    propagate_positions=True
)


def parse_proto(text, source_file=None):
    """
    Parse .proto source text into a lark tree.
    Syntax errors are reported as ProtoParseError with the offending location.
    """
    try:
        return parser.parse(text)
    except UnexpectedInput as e:
        line = e.line if getattr(e, 'line', -1) and e.line > 0 else None
        column = e.column if getattr(e, 'column', -1) and e.column > 0 else None
        message = str(e).strip().splitlines()[0] if str(e).strip() else type(e).__name__
        raise ProtoParseError(message, file=source_file, line=line, column=column) from e

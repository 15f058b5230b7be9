"""
JavaScript module generators.
Wraps the composed schema literal in glue code for one of three loading
conventions: a global variable shim, a CommonJS module or an AMD module.
All three build through the runtime library with the same namespace.
"""
import json
from typing import List, Optional

from generators.generator_utils import (
    RenderMode,
    builder_expression,
    namespace_segments,
)

SHIM_LIBRARY = "dcodeIO.ProtoBuf"
COMMONJS_LIBRARY = 'require("protobufjs")'
AMD_DEPENDENCY = "ProtoBuf"
AMD_LIBRARY_PARAM = "ProtoBuf"
SHIM_ROOT_NAME = "_root"


def _assign(target: str, value: str, mode: RenderMode, declare: bool = False) -> str:
    prefix = "var " if declare else ""
    if mode is RenderMode.COMPACT:
        return f"{prefix}{target}={value};"
    return f"{prefix}{target} = {value};"


def _join(lines: List[str], mode: RenderMode) -> str:
    separator = "" if mode is RenderMode.COMPACT else "\n"
    return separator.join(lines) + "\n"


def generate_shim(literal: str, namespace: Optional[str], mode: RenderMode = RenderMode.PRETTY) -> str:
    """
    Bind the built root to a global. Every namespace segment but the last gets
    an empty object if it does not exist yet; the last one holds the build.
    """
    builder = builder_expression(SHIM_LIBRARY, literal, namespace)
    if namespace is None:
        return _join([_assign(SHIM_ROOT_NAME, builder, mode, declare=True)], mode)

    segments = namespace_segments(namespace)
    lines = []
    path = ""
    for i, segment in enumerate(segments):
        path = f"{path}.{segment}" if path else segment
        is_last = i == len(segments) - 1
        if is_last:
            lines.append(_assign(path, builder, mode, declare=(i == 0)))
        else:
            empty = f"{path}||{{}}" if mode is RenderMode.COMPACT else f"{path} || {{}}"
            lines.append(_assign(path, empty, mode, declare=(i == 0)))
    return _join(lines, mode)


def generate_commonjs(literal: str, namespace: Optional[str], mode: RenderMode = RenderMode.PRETTY) -> str:
    builder = builder_expression(COMMONJS_LIBRARY, literal, namespace)
    return _join([_assign("module.exports", builder, mode)], mode)


def amd_module_id(namespace: str) -> str:
    """'My.Package' -> 'My/Package'; a leading separator is dropped."""
    module_id = namespace.replace(".", "/")
    if module_id.startswith("/"):
        module_id = module_id[1:]
    return module_id


def generate_amd(literal: str, namespace: Optional[str], mode: RenderMode = RenderMode.PRETTY) -> str:
    builder = builder_expression(AMD_LIBRARY_PARAM, literal, namespace)
    dependencies = json.dumps([AMD_DEPENDENCY])
    compact = mode is RenderMode.COMPACT

    args = []
    if namespace is not None:
        args.append(json.dumps(amd_module_id(namespace)))
    args.append(dependencies)
    if compact:
        factory = f"function({AMD_LIBRARY_PARAM}){{return {builder};}}"
        return f"define({','.join(args + [factory])});\n"

    header = f"define({', '.join(args)}, function({AMD_LIBRARY_PARAM}) {{"
    return _join([header, f"    return {builder};", "});"], mode)

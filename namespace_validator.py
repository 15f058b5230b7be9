"""
namespace_validator.py
Decides whether an output namespace names a real location in a composed schema:
the declared package first, then nested message/enum names below it.
"""
import re
from typing import Optional

from proto_ast import ProtoSchema, ProtoMessage

NAMESPACE_PATTERN = re.compile(r'^\.?[A-Za-z0-9_]+(\.[A-Za-z0-9_]+)*$')


def is_valid_namespace(namespace: Optional[str], schema: ProtoSchema) -> bool:
    """
    - namespace: dotted path such as 'foo.bar.Message', optionally with a leading dot
    - schema: the composed root schema
    Returns True when every segment resolves. The last segment's own children
    are not inspected.
    """
    if namespace is None:
        return True
    if not NAMESPACE_PATTERN.match(namespace):
        return False
    parts = namespace.split('.')
    if parts[0] == '':
        parts = parts[1:]
    package_parts = schema.package.split('.') if schema.package else []

    candidates = list(schema.messages)
    for i, part in enumerate(parts):
        # 1. Inside the declared package every segment must match exactly
        if i < len(package_parts):
            if part != package_parts[i]:
                return False
            continue
        # 2. Below the package, descend through message and enum names
        match = next((c for c in candidates if c.name == part), None)
        if match is None:
            return False
        if isinstance(match, ProtoMessage):
            candidates = list(match.messages) + list(match.enums)
        else:
            candidates = []
    return True

"""
proto_ast.py
The structural representation of a parsed .proto file. Nodes are plain containers
filled in by the tree builder; to_dict() gives the JSON form used by every
generator, with a fixed key order so output is reproducible.
"""
from typing import List, Optional, Dict, Any, Union


class ProtoField:
    def __init__(self, rule: str, type_name: str, name: str, field_id: int, options: Optional[Dict[str, Any]] = None,
                 keytype: Optional[str] = None, oneof: Optional[str] = None):
        self.rule: str = rule  # 'required', 'optional', 'repeated' or 'map'
        self.type: str = type_name
        self.name: str = name
        self.id: int = field_id
        self.options: Dict[str, Any] = options or {}
        self.keytype: Optional[str] = keytype  # Only for map fields
        self.oneof: Optional[str] = oneof  # Name of the enclosing oneof, if any

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "rule": self.rule,
            "type": self.type,
            "name": self.name,
            "id": self.id,
            "options": dict(self.options),
        }
        if self.keytype is not None:
            data["keytype"] = self.keytype
        if self.oneof is not None:
            data["oneof"] = self.oneof
        return data


class ProtoEnumValue:
    def __init__(self, name: str, value_id: int, options: Optional[Dict[str, Any]] = None):
        self.name = name
        self.id = value_id
        self.options = options or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "id": self.id}


class ProtoEnum:
    def __init__(self, name: str, values: List[ProtoEnumValue], options: Optional[Dict[str, Any]] = None):
        self.name = name
        self.values = values
        self.options = options or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "values": [v.to_dict() for v in self.values],
            "options": dict(self.options),
        }


class ProtoMessage:
    def __init__(self, name: str, fields: Optional[List[ProtoField]] = None, enums: Optional[List[ProtoEnum]] = None,
                 messages: Optional[List['ProtoMessage']] = None, options: Optional[Dict[str, Any]] = None,
                 oneofs: Optional[Dict[str, List[int]]] = None, extensions: Optional[List[int]] = None):
        self.name = name
        self.fields = fields if fields is not None else []
        self.enums = enums if enums is not None else []
        self.messages = messages if messages is not None else []
        self.options = options or {}
        self.oneofs = oneofs if oneofs is not None else {}
        self.extensions = extensions  # [from, to] or None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "fields": [f.to_dict() for f in self.fields],
            "enums": [e.to_dict() for e in self.enums],
            "messages": [m.to_dict() for m in self.messages],
            "options": dict(self.options),
            "oneofs": {k: list(v) for k, v in self.oneofs.items()},
        }
        if self.extensions is not None:
            data["extensions"] = list(self.extensions)
        return data


class ProtoRpc:
    def __init__(self, name: str, request: str, response: str, request_stream: bool = False,
                 response_stream: bool = False, options: Optional[Dict[str, Any]] = None):
        self.name = name
        self.request = request
        self.response = response
        self.request_stream = request_stream
        self.response_stream = response_stream
        self.options = options or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "request": self.request,
            "request_stream": self.request_stream,
            "response": self.response,
            "response_stream": self.response_stream,
            "options": dict(self.options),
        }


class ProtoService:
    def __init__(self, name: str, rpcs: Optional[List[ProtoRpc]] = None, options: Optional[Dict[str, Any]] = None):
        self.name = name
        self.rpcs = rpcs if rpcs is not None else []
        self.options = options or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "rpc": {rpc.name: rpc.to_dict() for rpc in self.rpcs},
            "options": dict(self.options),
        }


class ProtoSchema:
    """
    One parsed .proto file.

    `imports` holds the raw import strings as written in the source until the
    schema is composed; build_composed_schema then replaces it with the
    ProtoSchema of every inlined import, in declaration order.
    """

    def __init__(
        self,
        package: Optional[str] = None,
        imports: Optional[List[Union[str, 'ProtoSchema']]] = None,
        messages: Optional[List[ProtoMessage]] = None,
        enums: Optional[List[ProtoEnum]] = None,
        services: Optional[List[ProtoService]] = None,
        options: Optional[Dict[str, Any]] = None,
        syntax: Optional[str] = None,
        file: Optional[str] = None,
    ):
        self.package = package
        self.imports = imports if imports is not None else []
        self.messages = messages if messages is not None else []
        self.enums = enums if enums is not None else []
        self.services = services if services is not None else []
        self.options = options or {}
        self.syntax = syntax
        self.file = file

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"package": self.package}
        if self.syntax is not None:
            data["syntax"] = self.syntax
        data["options"] = dict(self.options)
        data["messages"] = [m.to_dict() for m in self.messages]
        data["enums"] = [e.to_dict() for e in self.enums]
        data["imports"] = [i.to_dict() if isinstance(i, ProtoSchema) else i for i in self.imports]
        data["services"] = [s.to_dict() for s in self.services]
        return data

"""
proto_errors.py
Error types raised while loading, resolving and rendering .proto schemas.
Every error here is fatal for the current invocation.
"""
from typing import List, Optional


class ProtoWranglerError(Exception):
    """Base class for all ProtoWrangler failures."""


class ConfigurationError(ProtoWranglerError):
    """An include directory given on the command line does not exist."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ResolutionError(ProtoWranglerError):
    """
    An import could not be found next to the importing file or in any include
    directory. `path` is always the first candidate that was tried.
    """

    def __init__(self, path: str, import_ref: str, importing_file: Optional[str] = None):
        self.path = path
        self.import_ref = import_ref
        self.importing_file = importing_file
        where = f" (imported from '{importing_file}')" if importing_file else ""
        super().__init__(f"Cannot resolve import '{import_ref}': no such file '{path}'{where}")


class ImportCycleError(ResolutionError):
    def __init__(self, path: str, import_ref: str, importing_file: Optional[str], chain: List[str]):
        self.chain = list(chain)
        super().__init__(path, import_ref, importing_file)
        self.args = (f"Import cycle detected: {' -> '.join(self.chain + [path])}",)


class ProtoParseError(ProtoWranglerError):
    def __init__(self, message: str, file: Optional[str] = None, line: Optional[int] = None, column: Optional[int] = None):
        self.file = file
        self.line = line
        self.column = column
        location = file or "<string>"
        if line is not None:
            location += f":{line}"
            if column is not None:
                location += f":{column}"
        super().__init__(f"{location}: {message}")


class NamespaceError(ProtoWranglerError):
    """The requested output namespace is not a legal location in the schema."""

    def __init__(self, namespace: str):
        self.namespace = namespace
        super().__init__(f"Illegal namespace: '{namespace}'")


class RenderError(ProtoWranglerError):
    pass

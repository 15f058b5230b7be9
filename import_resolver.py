"""
import_resolver.py
Locates imported .proto files and composes a schema with all of its transitive
imports inlined exactly once.
"""
import os
from typing import List, Optional, Callable

from proto_ast import ProtoSchema
from proto_errors import ConfigurationError, ResolutionError, ImportCycleError
from proto_file_loader import load_proto_file, is_valid_import_reference


def validate_include_dirs(include_dirs: List[str]) -> List[str]:
    """
    Check every include directory up front, before anything is parsed.
    Returns the directories as absolute paths, in the order given.
    """
    resolved = []
    for include_dir in include_dirs:
        if not os.path.isdir(include_dir):
            raise ConfigurationError(f"Include directory '{include_dir}' does not exist.", path=include_dir)
        resolved.append(os.path.abspath(include_dir))
    return resolved


def resolve_import_path(import_path: str, base_dir: str, include_dirs: List[str]) -> str:
    """
    Return the first existing file for an import: next to the importing file,
    then each include directory in order. When nothing exists the base-dir
    candidate is returned, so failures always report the same path.
    """
    first_candidate = os.path.normpath(os.path.join(os.path.abspath(base_dir), import_path))
    if os.path.exists(first_candidate):
        return first_candidate
    for include_dir in include_dirs:
        candidate = os.path.normpath(os.path.join(os.path.abspath(include_dir), import_path))
        if os.path.exists(candidate):
            return candidate
    return first_candidate


class ImportCache:
    """
    Absolute paths already inlined during one composition pass. Paths still
    being built are tracked separately so a real import cycle can be reported.
    One cache belongs to one top-level build and is never shared.
    """

    def __init__(self):
        self.seen = set()
        self.in_progress: List[str] = []

    def __contains__(self, path: str) -> bool:
        return path in self.seen

    def __len__(self) -> int:
        return len(self.seen)

    def begin(self, path: str) -> None:
        self.seen.add(path)
        self.in_progress.append(path)

    def finish(self, path: str) -> None:
        self.in_progress.remove(path)

    def is_building(self, path: str) -> bool:
        return path in self.in_progress


class ImportGraphBuilder:
    def __init__(self, include_dirs: Optional[List[str]] = None, verbose: bool = False,
                 log: Optional[Callable[[str], None]] = None):
        self.include_dirs = list(include_dirs or [])
        self.verbose = verbose
        self.log = log

    def debug_print(self, message: str) -> None:
        if self.verbose and self.log is not None:
            self.log(message)

    def build(self, file_path: str, import_cache: Optional[ImportCache] = None) -> ProtoSchema:
        """
        Parse `file_path` and, depth-first in declaration order, every schema it
        imports. Imports whose resolved path is already in the cache are left
        out of the result.
        """
        if import_cache is None:
            import_cache = ImportCache()
        abs_path = os.path.abspath(file_path)
        if abs_path not in import_cache:
            import_cache.begin(abs_path)
            try:
                return self._build(abs_path, import_cache)
            finally:
                import_cache.finish(abs_path)
        return self._build(abs_path, import_cache)

    def _build(self, abs_path: str, import_cache: ImportCache) -> ProtoSchema:
        self.debug_print(f"Parsing {abs_path}")
        schema = load_proto_file(abs_path)
        base_dir = os.path.dirname(abs_path)

        composed = []
        for import_ref in schema.imports:
            if not is_valid_import_reference(import_ref):
                self.debug_print(f"Skipping import '{import_ref}' in {abs_path}")
                continue
            resolved = resolve_import_path(import_ref, base_dir, self.include_dirs)
            if import_cache.is_building(resolved):
                raise ImportCycleError(resolved, import_ref, abs_path, import_cache.in_progress)
            if resolved in import_cache:
                self.debug_print(f"Already inlined '{import_ref}' ({resolved}), omitting")
                continue
            if not os.path.exists(resolved):
                raise ResolutionError(resolved, import_ref, abs_path)
            import_cache.begin(resolved)
            try:
                composed.append(self._build(resolved, import_cache))
            finally:
                import_cache.finish(resolved)

        schema.imports = composed
        return schema


def build_composed_schema(file_path: str, include_dirs: Optional[List[str]] = None,
                          import_cache: Optional[ImportCache] = None, verbose: bool = False,
                          log: Optional[Callable[[str], None]] = None) -> ProtoSchema:
    """Compose `file_path` with a fresh cache unless one is passed in."""
    builder = ImportGraphBuilder(include_dirs, verbose=verbose, log=log)
    return builder.build(file_path, import_cache if import_cache is not None else ImportCache())

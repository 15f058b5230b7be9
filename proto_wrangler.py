#!/usr/bin/env python3
"""
ProtoWrangler

This script reads a .proto schema, inlines every schema it imports, and writes
either the composed schema as JSON or JavaScript glue that hands it to the
ProtoBuf.js runtime. The result goes to standard output.

Usage:
    python proto_wrangler.py <input_file> [--path <dir> ...] [--format <fmt>] [--namespace [<ns>]] [--min] [--verbose]

Arguments:
    input_file        : Path to the .proto file to convert
    --path, -p        : Additional directory to search for imports (repeatable)
    --format, -f      : Output format (json, shim, commonjs or amd; default: json)
                        json:     the composed schema as a JSON document
                        shim:     assigns the built root to a global variable
                        commonjs: module.exports = require("protobufjs")...
                        amd:      define(...) module with a ProtoBuf dependency
    --namespace, -n   : Namespace to build and bind (e.g. My.Package). Without a
                        value, the schema's own package is used.
    --min, -m         : Compact output without indentation
    --verbose, -v     : Print debug information to stderr

Environment:
    PW_INCLUDE_PATH   : Extra include directories, separated by os.pathsep
    PW_FORMAT, PW_NAMESPACE, PW_MIN, PW_VERBOSE override the matching options

Exit status:
    0 on success, 1 when parsing, resolving or rendering fails, 2 when an
    include directory does not exist.

Example:
    python proto_wrangler.py messages.proto
    python proto_wrangler.py messages.proto --format commonjs --min
    python proto_wrangler.py messages.proto -p ../shared --format amd --namespace
    python proto_wrangler.py messages.proto --format shim --namespace My.Package.Message
"""

import argparse
import os
import sys
from typing import List, Optional

from proto_ast import ProtoSchema
from proto_errors import ConfigurationError, ProtoWranglerError
from import_resolver import ImportCache, ImportGraphBuilder, validate_include_dirs
from generators.generator_utils import Convention, RenderMode, DERIVE_NAMESPACE
from generators.output_projector import render

EXIT_SUCCESS = 0
EXIT_PROCESSING_ERROR = 1
EXIT_CONFIGURATION_ERROR = 2

FORMAT_CHOICES = [c.value for c in Convention]
TRUE_VALUES = ("1", "true", "yes", "on")


class ProtoFormatConverter:
    """
    Loads a schema with its imports and renders it in one output convention.
    """

    def __init__(self, input_file: str, include_dirs: Optional[List[str]] = None,
                 convention: Convention = Convention.STRUCTURAL, namespace=None,
                 mode: RenderMode = RenderMode.PRETTY, verbose: bool = False):
        """
        Initialize the converter.

        Args:
            input_file: Path to the root .proto file
            include_dirs: Directories searched for imports after the importing file's own directory
            convention: Output convention to render
            namespace: Dotted namespace, DERIVE_NAMESPACE, or None
            mode: Pretty or compact output
            verbose: Whether to print debug information (default: False)
        """
        self.input_file = input_file
        self.include_dirs = list(include_dirs or [])
        self.convention = convention
        self.namespace = namespace
        self.mode = mode
        self.verbose = verbose
        self.schema: Optional[ProtoSchema] = None

    def debug_print(self, message: str) -> None:
        if self.verbose:
            print(f"[DEBUG] {message}", file=sys.stderr)

    def validate_configuration(self) -> None:
        """Raises ConfigurationError when an include directory is missing."""
        self.include_dirs = validate_include_dirs(self.include_dirs)
        self.debug_print(f"Include directories: {self.include_dirs}")

    def load(self) -> ProtoSchema:
        builder = ImportGraphBuilder(self.include_dirs, verbose=self.verbose, log=self.debug_print)
        import_cache = ImportCache()
        self.schema = builder.build(self.input_file, import_cache)
        self.debug_print(f"Composed {len(import_cache)} file(s)")
        return self.schema

    def render(self) -> str:
        if self.schema is None:
            self.load()
        self.debug_print(f"Rendering {self.convention.value} ({self.mode.value}), namespace={self.namespace!r}")
        return render(self.schema, self.convention, self.namespace, self.mode)


def log_error(message: str) -> None:
    print(f"[ERROR] {message}", file=sys.stderr)


def parse_arguments(argv=None):
    """
    Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed command line arguments
    """
    parser = argparse.ArgumentParser(
        description="Convert .proto schemas to JSON or ProtoBuf.js module code",
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument('input', help='Path to the .proto file to convert')
    parser.add_argument('--path', '-p', action='append', default=[],
                        help='Additional include directory for imports (repeatable)')
    parser.add_argument('--format', '-f', choices=FORMAT_CHOICES, default=Convention.STRUCTURAL.value,
                        help='Output format (json, shim, commonjs or amd)')
    parser.add_argument('--namespace', '-n', nargs='?', const=DERIVE_NAMESPACE, default=None,
                        help="Namespace to build (default: none; without a value: the schema's package)")
    parser.add_argument('--min', '-m', action='store_true', help='Compact output')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose output for debugging')

    args = parser.parse_args(argv)

    # Override with environment variables if set
    if os.environ.get('PW_INCLUDE_PATH'):
        args.path.extend(p for p in os.environ['PW_INCLUDE_PATH'].split(os.pathsep) if p)
    if 'PW_FORMAT' in os.environ:
        env_format = os.environ['PW_FORMAT'].strip().lower()
        if env_format not in FORMAT_CHOICES:
            parser.error(f"PW_FORMAT: invalid choice: '{env_format}' (choose from {', '.join(FORMAT_CHOICES)})")
        args.format = env_format
    if 'PW_NAMESPACE' in os.environ:
        env_namespace = os.environ['PW_NAMESPACE'].strip()
        args.namespace = env_namespace if env_namespace else DERIVE_NAMESPACE
    if 'PW_MIN' in os.environ:
        args.min = os.environ['PW_MIN'].strip().lower() in TRUE_VALUES
    if 'PW_VERBOSE' in os.environ:
        args.verbose = os.environ['PW_VERBOSE'].strip().lower() in TRUE_VALUES

    return args


def main(argv=None) -> int:
    """
    Main entry point of the script.
    """
    args = parse_arguments(argv)

    converter = ProtoFormatConverter(
        args.input,
        include_dirs=args.path,
        convention=Convention(args.format),
        namespace=args.namespace,
        mode=RenderMode.COMPACT if args.min else RenderMode.PRETTY,
        verbose=args.verbose,
    )

    try:
        converter.validate_configuration()
    except ConfigurationError as e:
        log_error(str(e))
        return EXIT_CONFIGURATION_ERROR

    try:
        output = converter.render()
    except (ProtoWranglerError, OSError) as e:
        log_error(str(e))
        return EXIT_PROCESSING_ERROR

    sys.stdout.write(output)
    return EXIT_SUCCESS


if __name__ == '__main__':
    sys.exit(main())

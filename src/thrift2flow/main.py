from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from thrift2flow.generator.flow_generator import FlowFileGenerator, GeneratorOptions
from thrift2flow.naming import make_name_transform
from thrift2flow.parser.thrift_ast_parser import ThriftLoadError
from thrift2flow.parser.thrift_loader import load_thrift_program

OUTPUT_EXTENSION = ".js.flow"


def _find_files(working_path: str, extensions: List[str]) -> List[str]:
    """Recursively find files with given extensions under working_path."""
    results = []
    for ext in extensions:
        results.extend(str(p) for p in Path(working_path).rglob(f"*{ext}"))
    return sorted(results)


def output_path_for(thrift_file: str, working_path: str, output_dir: str) -> str:
    """Mirror thrift_file's location under working_path into output_dir."""
    relpath = os.path.relpath(thrift_file, working_path)
    stem = os.path.splitext(relpath)[0]
    return os.path.join(output_dir, stem + OUTPUT_EXTENSION)


def run(
    working_path: str,
    output_dir: Optional[str] = None,
    options: Optional[GeneratorOptions] = None,
) -> List[str]:
    """Main pipeline: find, load, generate, write.

    Returns list of generated file paths.
    """
    output_dir = output_dir or working_path
    options = options or GeneratorOptions()

    # 1. Find input files
    thrift_files = _find_files(working_path, [".thrift"])
    if not thrift_files:
        print(f"No .thrift files found under {working_path}")
        sys.exit(1)

    print(f"Found {len(thrift_files)} thrift file(s)")

    # 2. Generate one Flow file per Thrift file
    generated: List[str] = []
    for tf in thrift_files:
        try:
            program = load_thrift_program(tf)
        except ThriftLoadError as e:
            print(f"FATAL: {e}", file=sys.stderr)
            sys.exit(1)

        source = FlowFileGenerator(program, options).generate_flow_file()
        file_path = output_path_for(tf, working_path, output_dir)
        os.makedirs(os.path.dirname(file_path), exist_ok=True)
        Path(file_path).write_text(source)
        generated.append(file_path)
        print(f"  Generated {file_path}")

    print("Done!")
    return generated


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Thrift IDL to Flow type declarations",
    )
    parser.add_argument(
        "--working-path",
        required=True,
        help="Path to scan for .thrift files",
    )
    parser.add_argument(
        "--output-dir",
        help="Directory for generated .js.flow files (default: the working path)",
    )
    parser.add_argument(
        "--enumvalues",
        action="store_true",
        help="Give an enum's plain name to its values; keys go to <Name>Keys",
    )
    parser.add_argument(
        "--withsource",
        action="store_true",
        help="Include the absolute Thrift source path in the header",
    )
    parser.add_argument("--prefix", default="", help="Prefix for generated type names")
    parser.add_argument("--suffix", default="", help="Suffix for generated type names")
    parser.add_argument(
        "--camel-case",
        action="store_true",
        help="Convert generated type names to UpperCamelCase",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    options = GeneratorOptions(
        transform_name=make_name_transform(args.prefix, args.suffix, args.camel_case),
        enum_values=args.enumvalues,
        with_source=args.withsource,
    )
    run(args.working_path, args.output_dir, options)

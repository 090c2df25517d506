"""
VPP binary API binding generator

Reads VPP binary API modules in JSON form (*.api.json) and generates one
Python module per input file.

Usage:
    binapi-generator vpe.api.json --output-dir bin_api/
    binapi-generator --input-dir /usr/share/vpp/api/core --output-dir bin_api/
    binapi-generator --input-file interface.api.json --reserved interface=interfaces
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from .config import GeneratorConfig
from .errors import GenerateError, OutputError, SchemaError
from .parser import INPUT_FILE_EXT, load_package
from .python_generator import PythonGenerator

logger = logging.getLogger(__name__)


def generate_file(input_file, output_dir: Path, config: GeneratorConfig) -> Path:
    """Generate the module for one schema file and write it into output_dir"""
    try:
        package = load_package(input_file)
    except OSError as exc:
        raise SchemaError(f"reading {input_file} failed: {exc}") from exc

    # rendered completely before anything is written
    content = PythonGenerator(package, config).generate()

    path = output_dir / f"{config.package_name(package.name)}.py"
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    except OSError as exc:
        raise OutputError(f"writing {path} failed: {exc}") from exc
    logger.debug("wrote %d bytes to %s", len(content), path)
    return path


def _parse_reserved(parser: argparse.ArgumentParser, values: list[str]) -> dict[str, str]:
    reserved = {}
    for value in values:
        name, sep, replacement = value.partition("=")
        if not sep or not name or not replacement:
            parser.error(f"--reserved expects NAME=REPLACEMENT, got {value!r}")
        reserved[name] = replacement
    return reserved


def main(argv=None) -> int:
    start_time = time.perf_counter()

    parser = argparse.ArgumentParser(description="Generate Python bindings from VPP binary API JSON")
    parser.add_argument("input_files", nargs="*", help="Path to .api.json file(s) (positional)")
    parser.add_argument("--input-file", action="append", default=[], help="Path to .api.json file (alternative)")
    parser.add_argument("--input-dir", default="", help="Directory with .api.json files")
    parser.add_argument("--output-dir", "-o", default="bin_api", help="Output directory")
    parser.add_argument("--no-api-version", action="store_true", help="Do not emit VL_API_VERSION")
    parser.add_argument("--reserved", action="append", default=[], metavar="NAME=REPLACEMENT",
                        help="Rename a module whose name cannot be used (replaces the default table)")
    parser.add_argument("--runtime-module", default="binapigen.api", help="Import path of the runtime support module")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    input_files = list(args.input_files) + list(args.input_file)
    if args.input_dir:
        input_files.extend(sorted(str(p) for p in Path(args.input_dir).glob(f"*{INPUT_FILE_EXT}")))
    if not input_files:
        parser.error("input file is required (positional, --input-file or --input-dir)")

    config = GeneratorConfig(
        include_api_version=not args.no_api_version,
        runtime_module=args.runtime_module,
    )
    if args.reserved:
        config.reserved_names = _parse_reserved(parser, args.reserved)

    output_dir = Path(args.output_dir)
    failed = 0
    for input_file in input_files:
        # packages are independent, one failure does not stop the others
        try:
            path = generate_file(input_file, output_dir, config)
        except GenerateError as exc:
            print(f"error: {exc}", file=sys.stderr)
            failed += 1
            continue
        print(f"Generated: {path}")

    elapsed = time.perf_counter() - start_time
    if failed:
        print(f"Generation failed for {failed} of {len(input_files)} files", file=sys.stderr)
        return 1
    print(f"Generation completed in {elapsed*1000:.2f} ms")
    return 0


if __name__ == "__main__":
    sys.exit(main())

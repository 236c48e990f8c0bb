"""
CLI for compiling scenario sources.

Compiles a TSX scenario file to its JSON document, validates a file without
writing output, or lists the known components.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from src.transpiler import (
    CompilationError,
    TranspilerConfig,
    compile_scenario,
    create_default_registry,
)

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

# Diagnostics are printed by the CLI itself.
diagnostics_logger = logging.getLogger(f"{__name__}.diagnostics")
diagnostics_logger.propagate = False
diagnostics_logger.addHandler(logging.NullHandler())


def _read_source(path: str) -> str | None:
    source_file = Path(path)
    if not source_file.exists():
        logger.error(f"Source not found: {source_file}")
        return None
    return source_file.read_text(encoding="utf-8")


def _config(args) -> TranspilerConfig:
    return TranspilerConfig(
        strict_mode=getattr(args, "strict", False),
        allow_unknown_components=getattr(args, "allow_unknown", False),
        emit_default_styles=getattr(args, "emit_default_styles", False),
        logger=diagnostics_logger,
    )


def _print_diagnostics(diagnostics) -> None:
    for diagnostic in diagnostics:
        print(f"{diagnostic.severity.value.upper()} {diagnostic.code.value}: {diagnostic.message}")


def cmd_compile(args) -> int:
    """Compile a scenario to JSON."""
    source = _read_source(args.file)
    if source is None:
        return 1

    result = compile_scenario(source, _config(args))
    if isinstance(result, CompilationError):
        _print_diagnostics(result.diagnostics)
        return 1

    _print_diagnostics(result.warnings)
    output = result.to_json(indent=args.indent)
    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
        print(f"✅ Compiled {result.key} -> {args.output}")
    else:
        print(output)
    return 0


def cmd_validate(args) -> int:
    """Validate a scenario and print its diagnostics."""
    source = _read_source(args.file)
    if source is None:
        return 1

    result = compile_scenario(source, _config(args))
    if isinstance(result, CompilationError):
        _print_diagnostics(result.diagnostics)
        print(f"❌ {result.summary}")
        return 1

    _print_diagnostics(result.warnings)
    print(f"✅ {result.key} is valid")
    return 0


def cmd_components(args) -> int:
    """List the default component registry."""
    registry = create_default_registry()
    if args.json:
        print(json.dumps(registry.to_list(), indent=2))
        return 0

    print(f"\n{'Component':<15} {'Children':<10} {'Text':<6} {'Props'}")
    print("-" * 70)
    for definition in registry:
        print(
            f"{definition.name:<15} "
            f"{'yes' if definition.children_allowed else 'no':<10} "
            f"{'yes' if definition.text_children_allowed else 'no':<6} "
            f"{', '.join(definition.supported_props)}"
        )
    return 0


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(prog="scenario-compiler", description="Compile TSX scenarios to JSON")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Compile command
    compile_parser = subparsers.add_parser("compile", help="Compile a scenario to JSON")
    compile_parser.add_argument("file", help="TSX source file")
    compile_parser.add_argument("-o", "--output", help="Write JSON here instead of stdout")
    compile_parser.add_argument("--strict", action="store_true", help="Unknown components are errors")
    compile_parser.add_argument("--allow-unknown", action="store_true", help="Allow unknown components")
    compile_parser.add_argument(
        "--emit-default-styles", action="store_true", help="Include registry default styles"
    )
    compile_parser.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2)")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a scenario")
    validate_parser.add_argument("file", help="TSX source file")
    validate_parser.add_argument("--strict", action="store_true", help="Unknown components are errors")

    # Components command
    components_parser = subparsers.add_parser("components", help="List known components")
    components_parser.add_argument("--json", action="store_true", help="Print definitions as JSON")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "compile": cmd_compile,
        "validate": cmd_validate,
        "components": cmd_components,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())

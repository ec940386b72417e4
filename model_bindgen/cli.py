"""
Command-line interface for model-bindgen.

Usage:
    model-bindgen generate-model OWNER/NAME [VERSION] [--name NAME] [--output FILE]
"""

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .api.client import split_model_id
from .api.errors import ApiError, DecodeError
from .api.models import Model
from .codegen import generate_binding, generate_from_version
from .codegen.core.errors import GeneratorError
from .codegen.core.generator import GenerationResult
from .config import ConfigError, build_client, load_config
from .logging_config import get_logger, setup_logging
from .utils import JSONLoaderError, load_model_version_file

logger = get_logger(__name__)

# Status output goes to stderr so generated code can be piped from stdout
console = Console(stderr=True)

HANDLED_ERRORS = (
    ApiError,
    DecodeError,
    GeneratorError,
    ConfigError,
    JSONLoaderError,
    FileNotFoundError,
    FileExistsError,
    ValueError,
)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="model-bindgen",
        description="Generate typed Python bindings for hosted models",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser(
        "generate-model",
        help="Generate a binding for a model version",
        description="Generate a Python binding from a model version's schema",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  model-bindgen generate-model stability-ai/stable-diffusion
  model-bindgen generate-model kuprel/min-dalle 2af375da --output min_dalle.py
  model-bindgen generate-model acme/local --schema-file version.json
        """.strip(),
    )
    generate.add_argument("model_id", metavar="OWNER/NAME", help="Model to generate for")
    generate.add_argument(
        "version_id",
        metavar="VERSION",
        nargs="?",
        help="Version to pin (default: the model's latest version)",
    )
    generate.add_argument(
        "--name", help="Binding class name (default: derived from the model name)"
    )
    generate.add_argument(
        "--output", "-o", metavar="FILE", help="Output file (default: stdout)"
    )
    generate.add_argument(
        "--schema-file",
        metavar="FILE",
        help="Generate from a saved version or schema JSON file instead of the API",
    )
    generate.add_argument("--config", metavar="FILE", help="Configuration file path (JSON)")
    generate.add_argument(
        "--no-comments",
        action="store_true",
        help="Don't add docstrings or field comments to generated code",
    )
    generate.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging and show generation metadata",
    )
    generate.set_defaults(func=handle_generate_model)

    return parser


def handle_generate_model(args: argparse.Namespace) -> int:
    """Handle the generate-model subcommand."""
    try:
        output_path = Path(args.output) if args.output else None
        if output_path is not None and output_path.exists():
            raise CLIError(f"Refusing to overwrite existing file {output_path}")

        config = load_config(
            custom_config={"add_comments": False if args.no_comments else None},
            config_file=args.config,
        )

        if args.schema_file:
            result = _generate_offline(args, config)
        else:
            client = build_client(config)
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
                transient=True,
            ) as progress:
                progress.add_task(
                    f"[cyan]Generating binding for {escape(args.model_id)}...", total=None
                )
                result = generate_binding(
                    client, args.model_id, args.version_id, name=args.name, config=config
                )

        _write_output(result, output_path)
        _report(result, args.verbose)
        return 0

    except CLIError as e:
        console.print(f"[red]✗ Error:[/red] {escape(str(e))}")
        return 1
    except HANDLED_ERRORS as e:
        logger.debug("Generation failed", exc_info=True)
        console.print(f"[red]✗ Error:[/red] {escape(str(e))}")
        return 1


def _generate_offline(args: argparse.Namespace, config) -> GenerationResult:
    owner, name = split_model_id(args.model_id)
    version = load_model_version_file(args.schema_file)
    if args.version_id:
        version = dataclasses.replace(version, id=args.version_id)
    model = Model(owner=owner, name=name, url="")
    return generate_from_version(model, version, name=args.name, config=config)


def _write_output(result: GenerationResult, output_path: Optional[Path]) -> None:
    if output_path is None:
        sys.stdout.write(result.code)
        return

    # "x" fails if the file appeared while generating
    with output_path.open("x", encoding="utf-8") as f:
        f.write(result.code)
    console.print(f"[green]✓[/green] Binding saved to [cyan]{escape(str(output_path))}[/cyan]")


def _report(result: GenerationResult, verbose: bool) -> None:
    if verbose and result.metadata:
        metadata_table = Table(
            title="Generation Metadata",
            box=box.SIMPLE,
            show_header=True,
            header_style="bold cyan",
        )
        metadata_table.add_column("Property", style="bold")
        metadata_table.add_column("Value", style="green")

        for key, value in result.metadata.items():
            metadata_table.add_row(key.replace("_", " ").title(), escape(str(value)))

        console.print(metadata_table)

    if result.warnings:
        console.print("[yellow]Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  [yellow]•[/yellow] {escape(warning)}")


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the ``model-bindgen`` command."""
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=getattr(args, "verbose", False), console=console)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

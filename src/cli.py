"""
CLI for extracting and inspecting June mapping documents.

    june-mapping extract Assets/June/Editor/JuneEditor.cs -o JuneMapping.json
    june-mapping summary JuneMapping.json
"""

import argparse
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from src.mapping.compiler.property_registry import ConditionMergePolicy
from src.mapping.errors import MappingError
from src.mapping.extractor import ExtractionOptions, MappingExtractor
from src.service.document_store import load_document, save_document

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "JuneMapping.json"


def cmd_extract(args) -> int:
    """Extract a mapping document from an editor script."""
    options = ExtractionOptions.from_env()
    if args.entry_point:
        options = replace(options, entry_point=args.entry_point)
    if args.shader_root:
        options = replace(options, shader_root=Path(args.shader_root))
    if args.accumulate_conditions:
        options = replace(options, policy=ConditionMergePolicy.ACCUMULATE)

    document = MappingExtractor(options).extract_file(Path(args.source))
    output = save_document(document, args.output or os.getenv("JUNE_MAPPING_OUTPUT", DEFAULT_OUTPUT))

    modules, sections, properties = document.counts()
    print(f"{modules} modules, {sections} sections, {properties} properties -> {output}")
    return 0


def cmd_summary(args) -> int:
    """Print module, section and property counts of a stored document."""
    document = load_document(Path(args.document))

    if not document.modules:
        print("No modules")
        return 0

    print(f"\n{'Module':<30} {'Keyword':<25} {'Sections':>8} {'Properties':>10}")
    print("-" * 76)
    for module in document.modules:
        print(
            f"{module.name:<30} "
            f"{module.keyword or '-':<25} "
            f"{len(module.sections):>8} "
            f"{len(module.properties):>10}"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    env_path = Path(__file__).parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper(), format="%(message)s")

    parser = argparse.ArgumentParser(description="Extract June shader UI mappings")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Extract command
    extract_parser = subparsers.add_parser("extract", help="Extract a mapping from an editor script")
    extract_parser.add_argument("source", help="Path to the C# editor script")
    extract_parser.add_argument("-o", "--output", help=f"Output path (default: {DEFAULT_OUTPUT})")
    extract_parser.add_argument("--shader-root", help="Directory scanned for shader metadata")
    extract_parser.add_argument("--entry-point", help="Draw routine method name (default: OnGUI)")
    extract_parser.add_argument(
        "--accumulate-conditions",
        action="store_true",
        help="Never clear recorded conditions on an unconditional draw",
    )

    # Summary command
    summary_parser = subparsers.add_parser("summary", help="Summarize a mapping document")
    summary_parser.add_argument("document", help="Path to a mapping JSON document")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "extract": cmd_extract,
        "summary": cmd_summary,
    }

    try:
        return commands[args.command](args)
    except MappingError as e:
        logger.error(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""
Command-line interface and entry points for expectkit.

Renders the extractor methods of a tagged union described in a JSON/YAML
file, without importing the code that defines the union. Field types are
written as annotation strings (``"int"``, ``"list[str]"``).

Description file layout:

    {
        "name": "Foo",
        "shapes": [
            {"name": "Bar", "kind": "named", "is_fatal": true,
             "fields": [{"name": "a", "type": "int"}, {"name": "b", "type": "int"}]},
            {"name": "Baz", "kind": "positional", "fields": [{"type": "int"}, {"type": "int"}]},
            {"name": "Qux", "kind": "unit"}
        ],
        "generator": {"method_prefix": "expect_"}
    }
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from expectkit.core.logger import configure_root_logger, get_logger
from expectkit.generator.extractor import ExtractorGenerator
from expectkit.generator.render import render_module
from expectkit.models.generator_config import GeneratorConfig

logger = get_logger(__name__)

GENERATOR_SECTION = "generator"


def load_description(description_path: str) -> Dict[str, Any]:
    """
    Read a type description from a .json, .yaml or .yml file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the extension is not supported or the content is not a mapping
    """
    description_file = Path(description_path)
    if not description_file.exists():
        raise FileNotFoundError(f"Description file not found: {description_path}")

    with open(description_file, "r") as f:
        if description_file.suffix == ".json":
            data = json.load(f)
        elif description_file.suffix in (".yaml", ".yml"):
            import yaml
            data = yaml.safe_load(f)
        else:
            raise ValueError(
                f"Unsupported description format: {description_file.suffix}. "
                "Use .json or .yaml"
            )

    if not isinstance(data, dict):
        raise ValueError(f"Description must be a mapping, got {type(data).__name__}")
    logger.info(f"Loaded description from {description_path}")
    return data


def _split_config(description: Dict[str, Any]) -> Tuple[Dict[str, Any], GeneratorConfig]:
    description = dict(description)
    config = GeneratorConfig.model_validate(description.pop(GENERATOR_SECTION, None) or {})
    return description, config


def main(
    description_path: Optional[str] = None,
    description_dict: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Generate the extractor source for one type description.

    Args:
        description_path: Path to JSON/YAML description file
        description_dict: Description as a dictionary

    Returns:
        Result with status, type name, generated method names and source

    Raises:
        FileNotFoundError: If the description file doesn't exist
        ValueError: If neither description_path nor description_dict provided
        GenerationError: If the description cannot be generated

    Example:
        >>> result = main(description_dict={"name": "Foo", "shapes": [{"name": "Qux", "kind": "unit"}]})
        >>> result["methods"]
        ['expect_qux']
    """
    try:
        if description_dict:
            raw = description_dict
            logger.info("Using provided description dictionary")
        elif description_path:
            raw = load_description(description_path)
        else:
            raise ValueError("Either description_path or description_dict must be provided")

        description, config = _split_config(raw)
        methods = ExtractorGenerator(config).generate(description)
        type_name = methods[0].type_name

        result: Dict[str, Any] = {
            "status": "success",
            "type_name": type_name,
            "methods": [m.name for m in methods],
            "source": render_module(type_name, methods),
        }
        return result

    except Exception as e:
        logger.error(f"Generation failed: {str(e)}")
        raise


def validate_description(description_path: str) -> bool:
    """
    Check that a description file generates cleanly, without rendering it.

    Raises:
        Exception: If the description is invalid
    """
    description, config = _split_config(load_description(description_path))
    ExtractorGenerator(config).generate(description)
    logger.info("Description is valid")
    return True


def cli(argv: Optional[List[str]] = None) -> None:
    """
    Command-line interface for expectkit.

    Supports subcommands:
    - render: Print (or write) the generated extractor source
    - validate: Check a description without rendering

    Usage:
        expectkit render /path/to/foo.json [-o foo_expect.py]
        expectkit validate /path/to/foo.yaml
    """
    parser = argparse.ArgumentParser(
        prog="expectkit",
        description="Generate expect_<shape> extractors for tagged unions"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Command to execute"
    )

    render_parser = subparsers.add_parser(
        "render",
        help="Render the extractor source for a type description"
    )
    render_parser.add_argument(
        "description",
        help="Path to description file (JSON or YAML)"
    )
    render_parser.add_argument(
        "--output", "-o",
        help="Write the source to this file instead of stdout"
    )
    render_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a type description without rendering"
    )
    validate_parser.add_argument(
        "description",
        help="Path to description file (JSON or YAML)"
    )

    args = parser.parse_args(argv)

    if args.command == "render":
        configure_root_logger("DEBUG" if args.verbose else "INFO")
        try:
            result = main(description_path=args.description)
        except Exception as e:
            logger.error(f"Render failed: {e}")
            sys.exit(1)
        if args.output:
            Path(args.output).write_text(result["source"])
            logger.info(f"Wrote {len(result['methods'])} extractor(s) to {args.output}")
        else:
            sys.stdout.write(result["source"])
        sys.exit(0)

    elif args.command == "validate":
        configure_root_logger("INFO")
        try:
            validate_description(args.description)
            sys.exit(0)
        except Exception as e:
            logger.error(f"Validation failed: {e}")
            sys.exit(1)

    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    cli()

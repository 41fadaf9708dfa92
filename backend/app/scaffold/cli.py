"""
CrudCamp Scaffolder — Command Line Interface
==============================================

Usage:
    crudcamp-scaffold [NAME] [--dir PATH] [--package-manager pip|uv|poetry]
                      [--no-install] [--no-git] [--yes] [--force] [--verbose]

Anything not given as a flag is asked for interactively; with --yes the
default is taken instead of asking.

Exit codes:
    0  project created
    1  scaffolding failed (bad input, directory in use, broken manifest, command failed)
"""

import argparse
import logging
import re
import subprocess
import sys
import tomllib
from pathlib import Path
from typing import Callable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from app.scaffold.generator import (
    PACKAGE_MANAGERS,
    PROJECT_NAME_PATTERN,
    ScaffoldError,
    ScaffoldOptions,
    scaffold,
)

logger = logging.getLogger("crudcamp.scaffold")

DEFAULT_NAME = "my-api"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crudcamp-scaffold",
        description="Generate a new FastAPI CRUD backend project.",
    )
    parser.add_argument("name", nargs="?", help="Project name (lowercase, e.g. todo-api)")
    parser.add_argument("--dir", dest="target_dir", default=".", help="Parent directory (default: .)")
    parser.add_argument(
        "--package-manager",
        choices=PACKAGE_MANAGERS,
        default=None,
        help="Tool used to install dependencies (default: pip)",
    )
    parser.add_argument("--no-install", action="store_true", help="Skip dependency installation")
    parser.add_argument("--no-git", action="store_true", help="Skip `git init`")
    parser.add_argument("-y", "--yes", action="store_true", help="Accept defaults, never prompt")
    parser.add_argument("--force", action="store_true", help="Scaffold into a non-empty directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def prompt(
    question: str,
    default: str,
    validate: Optional[Callable[[str], bool]] = None,
    input_fn: Callable[[str], str] = input,
) -> str:
    """Asks until the answer (or the default, on empty input) passes `validate`."""
    while True:
        answer = input_fn(f"{question} [{default}]: ").strip() or default
        if validate is None or validate(answer):
            return answer
        print(f"  '{answer}' is not valid, try again.")


def confirm(question: str, default: bool = True, input_fn: Callable[[str], str] = input) -> bool:
    hint = "Y/n" if default else "y/N"
    answer = input_fn(f"{question} [{hint}]: ").strip().lower()
    if not answer:
        return default
    return answer in ("y", "yes")


def resolve_options(
    args: argparse.Namespace,
    input_fn: Callable[[str], str] = input,
) -> ScaffoldOptions:
    """Merges flags with interactive answers into validated ScaffoldOptions."""
    name = args.name
    if name is None:
        name = DEFAULT_NAME if args.yes else prompt(
            "Project name",
            DEFAULT_NAME,
            validate=lambda v: re.match(PROJECT_NAME_PATTERN, v) is not None,
            input_fn=input_fn,
        )

    package_manager = args.package_manager
    if package_manager is None:
        package_manager = "pip" if args.yes else prompt(
            f"Package manager ({'/'.join(PACKAGE_MANAGERS)})",
            "pip",
            validate=lambda v: v in PACKAGE_MANAGERS,
            input_fn=input_fn,
        )

    install = not args.no_install
    if install and not args.yes:
        install = confirm("Install dependencies now?", input_fn=input_fn)

    git = not args.no_git
    if git and not args.yes:
        git = confirm("Initialize a git repository?", input_fn=input_fn)

    try:
        return ScaffoldOptions(
            name=name,
            target_dir=Path(args.target_dir),
            package_manager=package_manager,
            install=install,
            git=git,
            force=args.force,
        )
    except PydanticValidationError as e:
        problems = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
        raise ScaffoldError(f"Invalid options: {problems}") from e


def main(argv: Optional[List[str]] = None, input_fn: Callable[[str], str] = input) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        force=True,
    )

    try:
        opts = resolve_options(args, input_fn=input_fn)
        project_dir = scaffold(opts)
    except ScaffoldError as e:
        logger.error("Error: %s", e)
        return 1
    except subprocess.CalledProcessError as e:
        logger.error("Command failed with exit code %d: %s", e.returncode, " ".join(map(str, e.cmd)))
        return 1
    except FileNotFoundError as e:
        logger.error("Command not found: %s", e.filename)
        return 1
    except tomllib.TOMLDecodeError as e:
        logger.error("Existing pyproject.toml is not valid TOML: %s", e)
        return 1

    logger.info("")
    logger.info("Project created in %s", project_dir)
    logger.info("Next steps:")
    logger.info("  cd %s", project_dir)
    if not opts.install:
        logger.info("  install dependencies (e.g. pip install -e '.[test]')")
    logger.info("  cp .env.example .env")
    logger.info("  uvicorn %s.main:app --reload --app-dir src", opts.package)
    return 0


if __name__ == "__main__":
    sys.exit(main())

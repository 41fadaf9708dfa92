"""
CrudCamp Scaffolder — Project Generator
=========================================

What:  The filesystem and subprocess steps that build a new project.
How:   Plain functions, called in order by `scaffold()`. Each step either
       completes or raises; nothing is rolled back.

Generated layout (name="todo-api"):
    todo-api/
    ├── .env.example
    ├── .gitignore
    ├── pyproject.toml
    ├── src/todo_api/
    │   ├── __init__.py
    │   ├── main.py
    │   ├── routes/      __init__.py
    │   ├── services/    __init__.py
    │   ├── models/      __init__.py
    │   ├── schemas/     __init__.py
    │   └── middleware/  __init__.py
    └── tests/
        └── test_health.py
"""

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field

from app.scaffold.manifest import patch_manifest
from app.scaffold.templates import (
    ENV_EXAMPLE,
    GITIGNORE,
    PACKAGE_LAYERS,
    render_health_test,
    render_main,
)

logger = logging.getLogger(__name__)

PROJECT_NAME_PATTERN = r"^[a-z][a-z0-9_-]*$"
PACKAGE_MANAGERS = ("pip", "uv", "poetry")


class ScaffoldError(Exception):
    """A scaffolding precondition failed (bad name, target directory in use)."""


class ScaffoldOptions(BaseModel):
    """Everything the generator needs, resolved from flags and prompts."""

    name: str = Field(pattern=PROJECT_NAME_PATTERN, max_length=64)
    target_dir: Path = Path(".")
    package_manager: str = Field(default="pip", pattern="^(pip|uv|poetry)$")
    install: bool = True
    git: bool = True
    force: bool = False

    @property
    def package(self) -> str:
        """Import package name: `todo-api` → `todo_api`."""
        return self.name.replace("-", "_")

    @property
    def project_dir(self) -> Path:
        return self.target_dir / self.name


# ══════════════════════════════════════════════════════════════════════════
# Steps
# ══════════════════════════════════════════════════════════════════════════

def ensure_target(opts: ScaffoldOptions) -> None:
    """
    Raises:
        ScaffoldError: project_dir exists and is not empty (unless force)
    """
    project_dir = opts.project_dir
    if project_dir.exists() and not project_dir.is_dir():
        raise ScaffoldError(f"{project_dir} already exists and is not a directory")
    if project_dir.is_dir() and any(project_dir.iterdir()) and not opts.force:
        raise ScaffoldError(
            f"{project_dir} already exists and is not empty (use --force to scaffold into it)"
        )


def create_folders(opts: ScaffoldOptions) -> List[Path]:
    """Creates the package tree; returns every directory in creation order."""
    package_root = opts.project_dir / "src" / opts.package
    folders = [opts.project_dir, package_root]
    folders += [package_root / layer for layer in PACKAGE_LAYERS]
    folders.append(opts.project_dir / "tests")

    for folder in folders:
        folder.mkdir(parents=True, exist_ok=True)

    for folder in [package_root] + [package_root / layer for layer in PACKAGE_LAYERS]:
        (folder / "__init__.py").touch(exist_ok=True)

    logger.info("Created %d folders under %s", len(folders), opts.project_dir)
    return folders


def write_config_files(opts: ScaffoldOptions) -> List[Path]:
    """Writes .env.example, .gitignore, the FastAPI entry point and a smoke test."""
    files = {
        opts.project_dir / ".env.example": ENV_EXAMPLE,
        opts.project_dir / ".gitignore": GITIGNORE,
        opts.project_dir / "src" / opts.package / "main.py": render_main(opts.name, opts.package),
        opts.project_dir / "tests" / "test_health.py": render_health_test(opts.package),
    }
    for path, content in files.items():
        path.write_text(content, encoding="utf-8")
        logger.debug("Wrote %s", path)
    return list(files)


def venv_python() -> str:
    """Path of the virtualenv interpreter, relative to the project directory."""
    scripts = "Scripts" if os.name == "nt" else "bin"
    return str(Path(".venv") / scripts / "python")


def install_commands(package_manager: str) -> List[List[str]]:
    if package_manager == "uv":
        return [["uv", "sync", "--extra", "test"]]
    if package_manager == "poetry":
        return [["poetry", "install"]]
    return [
        [sys.executable, "-m", "venv", ".venv"],
        [venv_python(), "-m", "pip", "install", "-e", ".[test]"],
    ]


def run_commands(commands: List[List[str]], cwd: Path) -> None:
    """
    Runs each command in `cwd`, stopping at the first failure.

    Raises:
        subprocess.CalledProcessError: a command exited non-zero
        FileNotFoundError: the executable is not installed
    """
    for command in commands:
        logger.info("$ %s", " ".join(command))
        subprocess.run(command, cwd=cwd, check=True)


def scaffold(opts: ScaffoldOptions) -> Path:
    """Builds the project described by `opts` and returns its directory."""
    ensure_target(opts)
    create_folders(opts)
    write_config_files(opts)
    patch_manifest(opts.project_dir / "pyproject.toml", opts.name, opts.package)
    logger.info("Wrote pyproject.toml for %s", opts.name)

    commands: List[List[str]] = []
    if opts.install:
        commands += install_commands(opts.package_manager)
    if opts.git:
        commands.append(["git", "init"])
    run_commands(commands, cwd=opts.project_dir)

    return opts.project_dir

"""Tests for docstring coverage.

This module uses AST parsing to verify that package modules and classes
have docstrings.

Exemptions are maintained for:
- Empty __init__.py files
- Private helpers (leading underscore)
"""

import ast
from pathlib import Path
from typing import List

import pytest

PACKAGE_ROOT = Path(__file__).resolve().parent.parent / "chargepoint_capture"


def get_python_files(root_dir: Path) -> List[Path]:
  """Return every Python file below ``root_dir``, skipping empty files."""
  return sorted(
    path for path in root_dir.rglob("*.py")
    if "__pycache__" not in path.parts and path.read_text(encoding="utf-8").strip()
  )


def parse_file(file_path: Path) -> ast.Module:
  """Parse a Python file into an AST."""
  return ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))


@pytest.fixture(scope="module")
def python_files() -> List[Path]:
  return get_python_files(PACKAGE_ROOT)


def test_package_files_found(python_files: List[Path]):
  assert python_files


def test_module_docstrings(python_files: List[Path]):
  """Every non-empty module explains its purpose."""
  errors = [
    f"Missing module docstring in {file_path}"
    for file_path in python_files
    if ast.get_docstring(parse_file(file_path)) is None
  ]
  if errors:
    pytest.fail("\n".join(errors))


def test_class_docstrings(python_files: List[Path]):
  """Every public class has a docstring."""
  errors = []
  for file_path in python_files:
    for node in ast.walk(parse_file(file_path)):
      if isinstance(node, ast.ClassDef) and not node.name.startswith("_"):
        if ast.get_docstring(node) is None:
          errors.append(f"Missing class docstring for '{node.name}' in {file_path}:{node.lineno}")
  if errors:
    pytest.fail("\n".join(errors))


def is_public_function(name: str) -> bool:
  """Return True for names that are neither private nor dunder."""
  return not name.startswith("_")


def test_function_docstrings(python_files: List[Path]):
  """Every public function and method has a docstring."""
  errors = []
  for file_path in python_files:
    for node in ast.walk(parse_file(file_path)):
      if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)) and is_public_function(node.name):
        if ast.get_docstring(node) is None:
          errors.append(f"Missing function docstring for '{node.name}' in {file_path}:{node.lineno}")
  if errors:
    pytest.fail("\n".join(errors))

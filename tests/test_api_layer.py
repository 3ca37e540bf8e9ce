"""Tests for API layer guardrails and contracts."""

import ast
from pathlib import Path

API_DIR = Path(__file__).resolve().parent.parent / "src" / "recordgate" / "api"

FORBIDDEN_MODULES = ["sqlalchemy", "sessionmaker", "declarative_base"]
FORBIDDEN_NAMES = ["Column", "Integer", "String", "Base", "select"]


def _api_files():
    return sorted(API_DIR.glob("*.py"))


def _is_type_checking_block(node):
    return isinstance(node, ast.If) and (
        (isinstance(node.test, ast.Name) and node.test.id == "TYPE_CHECKING")
        or (isinstance(node.test, ast.Attribute) and node.test.attr == "TYPE_CHECKING")
    )


def _runtime_imports(tree):
    """Yield import nodes that execute at import time (TYPE_CHECKING blocks skipped)."""
    pending = list(tree.body)
    while pending:
        node = pending.pop()
        if _is_type_checking_block(node):
            pending.extend(node.orelse)
            continue
        if isinstance(node, (ast.Import, ast.ImportFrom)):
            yield node
        for child in ast.iter_child_nodes(node):
            if isinstance(child, ast.stmt):
                pending.append(child)


def test_api_files_are_found():
    names = {path.name for path in _api_files()}

    assert {"records_api.py", "models.py", "status.py"} <= names


def test_api_layer_has_no_sqlalchemy_imports():
    """API files may import Session for type hints, but only under TYPE_CHECKING."""
    violations = []
    for api_file in _api_files():
        source = api_file.read_text(encoding="utf-8")
        tree = ast.parse(source, filename=str(api_file))

        for node in _runtime_imports(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    if any(forbidden in alias.name for forbidden in FORBIDDEN_MODULES):
                        violations.append(f"{api_file.name}:{node.lineno} imports '{alias.name}'")
            else:
                module = node.module or ""
                if any(forbidden in module for forbidden in FORBIDDEN_MODULES):
                    violations.append(f"{api_file.name}:{node.lineno} imports from '{module}'")
                for alias in node.names:
                    if alias.name in FORBIDDEN_NAMES:
                        violations.append(f"{api_file.name}:{node.lineno} imports '{alias.name}'")

    assert not violations, "API layer has SQLAlchemy violations:\n" + "\n".join(violations)


def test_api_layer_has_no_direct_session_calls():
    """Queries and commits belong to the repo and mutation modules."""
    patterns = ("session.query(", "session.add(", "session.commit(", ".execute(")
    for api_file in _api_files():
        for lineno, line in enumerate(api_file.read_text(encoding="utf-8").splitlines(), 1):
            stripped = line.strip()
            if stripped.startswith("#"):
                continue
            for pattern in patterns:
                assert pattern not in stripped, f"{api_file.name}:{lineno} calls {pattern}"

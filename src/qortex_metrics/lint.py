"""Static check of literal metric names and quantiles.

Finds calls such as ``Name("http_requests")``, ``Label.of("method")``,
``Suffix("_total")`` and ``Quantile.of(0.99, 0.001)`` whose arguments are
literals, and validates them with the same rules the runtime uses.
Attribute calls (``qm.Name("...")``) count only when the receiver is an
imported qortex_metrics module; ``other.Name("...")`` is left alone. The
scanned code is parsed, never imported, so this is safe to run in CI
before deployment:

    qortex-metrics-lint src/
"""

from __future__ import annotations

import ast
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from qortex_metrics.errors import ValidationError
from qortex_metrics.name import Name, Suffix
from qortex_metrics.summary import Quantile

_STRING_CHECKS = {
    "Name": Name.parse,
    "Label": Name.parse,
    "Suffix": Suffix.parse,
}
_CONSTRUCTOR_ATTRS = {"of"}
_PACKAGE = "qortex_metrics"
_SUBMODULES = {"name", "summary"}


@dataclass(frozen=True)
class LintIssue:
    path: str
    line: int
    col: int
    message: str

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.col}: {self.message}"


def _module_aliases(tree: ast.AST) -> set[str]:
    """Local names bound to qortex_metrics or one of its submodules."""
    aliases = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if alias.name == _PACKAGE or alias.name.startswith(_PACKAGE + "."):
                    aliases.add(alias.asname or alias.name.split(".")[0])
        elif isinstance(node, ast.ImportFrom) and node.module == _PACKAGE:
            for alias in node.names:
                if alias.name in _SUBMODULES:
                    aliases.add(alias.asname or alias.name)
    return aliases


def _dotted(node: ast.expr) -> str | None:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        head = _dotted(node.value)
        return None if head is None else f"{head}.{node.attr}"
    return None


def _target(func: ast.expr, modules: set[str]) -> str | None:
    """Name of the validated type a call constructs, if any."""
    if isinstance(func, ast.Name):
        return func.id
    if isinstance(func, ast.Attribute):
        if func.attr in _CONSTRUCTOR_ATTRS:
            return _target(func.value, modules)
        # qm.Name(...), only when qm is an imported qortex_metrics module
        receiver = _dotted(func.value)
        if receiver is not None and receiver.split(".")[0] in modules:
            return func.attr
    return None


def _number(node: ast.expr) -> float | None:
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        return float(node.value)
    if isinstance(node, ast.UnaryOp) and isinstance(node.op, (ast.USub, ast.UAdd)):
        inner = _number(node.operand)
        if inner is None:
            return None
        return -inner if isinstance(node.op, ast.USub) else inner
    return None


def _check_call(call: ast.Call, modules: set[str]) -> ValidationError | None:
    target = _target(call.func, modules)
    if target in _STRING_CHECKS:
        if len(call.args) != 1 or call.keywords:
            return None
        arg = call.args[0]
        if isinstance(arg, ast.Constant) and isinstance(arg.value, str):
            result = _STRING_CHECKS[target](arg.value)
            if isinstance(result, ValidationError):
                return result
        return None
    if target == "Quantile":
        if len(call.args) != 2 or call.keywords:
            return None
        q, e = (_number(a) for a in call.args)
        if q is None or e is None:
            return None
        result = Quantile.parse(q, e)
        if isinstance(result, ValidationError):
            return result
    return None


def lint_source(text: str, filename: str = "<string>") -> list[LintIssue]:
    """All invalid literal names/quantiles in one module's source."""
    tree = ast.parse(text, filename=filename)
    modules = _module_aliases(tree)
    issues = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Call):
            err = _check_call(node, modules)
            if err is not None:
                issues.append(LintIssue(filename, node.lineno, node.col_offset, str(err)))
    issues.sort(key=lambda i: (i.line, i.col))
    return issues


def _python_files(paths: Iterable[Path]) -> Iterator[Path]:
    for path in paths:
        if path.is_dir():
            yield from sorted(path.rglob("*.py"))
        else:
            yield path


def lint_paths(paths: Iterable[str | Path]) -> list[LintIssue]:
    """Lint files and directories (recursively, ``*.py`` only)."""
    issues: list[LintIssue] = []
    for file in _python_files(Path(p) for p in paths):
        issues.extend(lint_source(file.read_text(encoding="utf-8"), str(file)))
    return issues

"""Tests for the literal name/quantile checker and its CLI."""

from __future__ import annotations

import textwrap

from typer.testing import CliRunner

from qortex_metrics.cli import app
from qortex_metrics.lint import lint_paths, lint_source

runner = CliRunner()

GOOD = textwrap.dedent(
    """
    from qortex_metrics import Label, Name, Quantile, Suffix

    requests = Name("http_requests")
    method = Label.of("method")
    total = Suffix("_total")
    p99 = Quantile.of(0.99, 0.001)
    computed = Name(some_variable)
    """
)

BAD = textwrap.dedent(
    """
    import qortex_metrics as qm

    a = qm.Name("1starts_with_digit")
    b = Label("has space")
    c = Suffix.of("dash-ed")
    d = Quantile(1.5, 0.01)
    e = Quantile.of(0.5, -0.1)
    """
)


class TestLintSource:
    def test_clean_source(self):
        assert lint_source(GOOD) == []

    def test_finds_every_bad_literal(self):
        issues = lint_source(BAD, "bad.py")
        assert [i.line for i in issues] == [4, 5, 6, 7, 8]
        assert "does not match regex" in issues[0].message
        assert "Quantile 1.5 invalid" in issues[3].message
        assert "Error -0.1 invalid" in issues[4].message

    def test_issue_format(self):
        issue = lint_source('Name("")', "m.py")[0]
        assert str(issue).startswith("m.py:1:0: Input String -  does not match regex")

    def test_non_literal_arguments_are_skipped(self):
        assert lint_source("Name(prefix + 'x')\nQuantile.of(q, 0.1)") == []

    def test_unrelated_calls_are_skipped(self):
        assert lint_source('print("not a name")\nfoo.of("-")') == []

    def test_attribute_on_unrelated_object_is_skipped(self):
        assert lint_source('other_obj.Name("a-b")\nrow.Label.of("x y")') == []

    def test_attribute_on_imported_module_is_checked(self):
        source = textwrap.dedent(
            """
            import qortex_metrics.name as qn
            from qortex_metrics import summary
            import qortex_metrics

            qn.Name("a-b")
            summary.Quantile.of(2.0, 0.1)
            qortex_metrics.name.Suffix("x y")
            """
        )
        assert [i.line for i in lint_source(source)] == [6, 7, 8]

    def test_lint_paths_recurses(self, tmp_path):
        pkg = tmp_path / "pkg"
        pkg.mkdir()
        (pkg / "ok.py").write_text(GOOD)
        (pkg / "bad.py").write_text(BAD)
        (pkg / "notes.txt").write_text('Name("-")')
        issues = lint_paths([tmp_path])
        assert len(issues) == 5
        assert all(i.path.endswith("bad.py") for i in issues)


class TestLintCli:
    def test_clean_exit_zero(self, tmp_path):
        (tmp_path / "ok.py").write_text(GOOD)
        result = runner.invoke(app, [str(tmp_path)])
        assert result.exit_code == 0
        assert "No invalid literals found." in result.output

    def test_issues_exit_one(self, tmp_path):
        bad = tmp_path / "bad.py"
        bad.write_text(BAD)
        result = runner.invoke(app, [str(bad)])
        assert result.exit_code == 1
        assert "bad.py:4:" in result.output
        assert "5 invalid literal(s) found." in result.output

    def test_missing_path_exit_two(self, tmp_path):
        result = runner.invoke(app, [str(tmp_path / "nope.py")])
        assert result.exit_code == 2

    def test_syntax_error_exit_two(self, tmp_path):
        broken = tmp_path / "broken.py"
        broken.write_text("def (:\n")
        result = runner.invoke(app, [str(broken)])
        assert result.exit_code == 2

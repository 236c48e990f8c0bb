"""Tests for the compile pipeline."""

import json
import logging

import pytest

from src.transpiler import (
    CompilationError,
    DiagnosticCode,
    ScenarioCompiler,
    TranspiledScenario,
    TranspilerConfig,
    compile_scenario,
)
from src.transpiler.extractor import ScenarioExtractor
from tests.conftest import compile_err, compile_ok, scenario_source

SOURCE = scenario_source(
    """
const cart = store({ scope: 'app', initialValue: { count: 0 } })

export const Header = ({ title }) => <Text>{title}</Text>

export default function Main({ rating }) {
  return (
    <Column style={{ padding: 16 }}>
      <Header />
      <Button onPress={() => cart.transaction((s) => { s.set('a', 1); s.set('b', rating) })} />
    </Column>
  )
}
""",
    key="pipeline-test",
)


def test_full_document():
    """A complete scenario compiles to the expected document."""
    document = compile_ok(SOURCE).to_dict()

    assert document["key"] == "pipeline-test"
    assert document["stores"] == [{"scope": "app", "storage": "memory", "initialValue": {"count": 0}}]
    assert document["main"]["type"] == "Column"
    assert document["components"]["Header"]["type"] == "Text"

    [transaction] = document["actions"]
    assert transaction["type"] == "store.transaction"
    assert [a["value"] for a in transaction["actions"]] == [1, {"type": "prop", "key": "rating"}]


def test_compile_is_idempotent():
    """Same source, same bytes."""
    first = compile_ok(SOURCE).to_json()
    second = compile_ok(SOURCE).to_json()
    assert first == second


def test_json_round_trip():
    """The wire document parses back into an equal document."""
    scenario = compile_ok(SOURCE)
    restored = TranspiledScenario.from_json(scenario.to_json())
    assert restored.to_dict() == scenario.to_dict()
    assert json.loads(scenario.to_json(indent=None)) == scenario.to_dict()


def test_compiler_instance_is_reusable():
    """State does not carry over between compiles."""
    compiler = ScenarioCompiler()
    first = compiler.compile(SOURCE)
    second = compiler.compile(SOURCE)
    assert first.to_dict() == second.to_dict()


@pytest.mark.parametrize("source", ["", "   \n\t  ", None])
def test_empty_source(source):
    """Blank input is EMPTY_SOURCE."""
    result = compile_scenario(source)
    assert isinstance(result, CompilationError)
    assert result.codes == [DiagnosticCode.EMPTY_SOURCE]


def test_syntax_error_has_location():
    """Parse failures carry line and column."""
    error = compile_err("export const SCENARIO_KEY = 'x'\nexport default () => <View\n")
    [diagnostic] = error.diagnostics
    assert diagnostic.code == DiagnosticCode.SYNTAX_ERROR
    assert diagnostic.line is not None
    assert diagnostic.column is not None


def test_internal_errors_fail_closed(monkeypatch):
    """Unexpected exceptions become INTERNAL_ERROR instead of escaping."""

    def explode(self, program):
        raise RuntimeError("boom")

    monkeypatch.setattr(ScenarioExtractor, "extract", explode)
    error = compile_err(SOURCE)
    assert error.codes == [DiagnosticCode.INTERNAL_ERROR]
    assert "boom" in error.diagnostics[0].message


def test_error_to_dict():
    """The error wire form lists every diagnostic."""
    error = compile_err("export default () => <><Text /></>")
    data = error.to_dict()
    assert data["error"] == error.summary
    assert [d["code"] for d in data["errors"]] == ["EMPTY_MAIN", "MISSING_KEY"]
    assert all(d["severity"] == "error" for d in data["errors"])


def test_warnings_are_not_serialized():
    """Warnings are returned on the result but stay off the wire."""
    scenario = compile_ok(scenario_source("export default () => <Mystery />"))
    assert [w.code for w in scenario.warnings] == [DiagnosticCode.UNKNOWN_COMPONENT]
    assert "warnings" not in scenario.to_dict()
    assert "warnings" not in json.loads(scenario.to_json())


def test_diagnostics_go_to_configured_logger(caplog):
    """Diagnostics are logged to config.logger with matching levels."""
    sink = logging.getLogger("tests.scenario.sink")
    with caplog.at_level(logging.DEBUG, logger="tests.scenario.sink"):
        compile_scenario(scenario_source("export default () => <Mystery />"), TranspilerConfig(logger=sink))
        compile_scenario("export default () => <View />", TranspilerConfig(logger=sink))

    records = [r for r in caplog.records if r.name == "tests.scenario.sink"]
    assert [(r.levelno, r.getMessage().split(":")[0]) for r in records] == [
        (logging.WARNING, "WARNING UNKNOWN_COMPONENT"),
        (logging.ERROR, "ERROR MISSING_KEY"),
    ]


def test_from_env(monkeypatch):
    """SCENARIO_* variables set defaults; explicit overrides win."""
    monkeypatch.setenv("SCENARIO_STRICT_MODE", "true")
    monkeypatch.setenv("SCENARIO_EMIT_DEFAULT_STYLES", "0")
    monkeypatch.delenv("SCENARIO_ALLOW_UNKNOWN_COMPONENTS", raising=False)
    config = TranspilerConfig.from_env(emit_default_styles=True, allow_unknown_components=None)

    assert config.strict_mode is True
    assert config.emit_default_styles is True
    assert config.allow_unknown_components is False

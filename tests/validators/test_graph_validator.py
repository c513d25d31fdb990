"""Tests for compiled script graph validation."""

from vnscript.compiler import ScriptCompiler
from vnscript.compiler.models import Choice, CompiledScript, ScriptNode
from vnscript.types import END
from vnscript.validators import ScriptGraphValidator, successors


def validate(text):
    return ScriptGraphValidator().validate(ScriptCompiler().compile(text).script)


class TestSuccessors:
    def test_choices_take_precedence(self):
        node = ScriptNode("n", next_id="x", choices=(Choice("A.a", "y"),))
        assert successors(node) == ["y"]

    def test_next_id(self):
        assert successors(ScriptNode("n", next_id="x")) == ["x"]

    def test_terminal(self):
        assert successors(ScriptNode("n")) == []


class TestScriptGraphValidator:
    """Reachability, links and endings."""

    def test_linear_script_with_ending_is_clean(self):
        result = validate("A：One\nA：Two\n【返回标题】")  # noqa: RUF001
        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []
        assert result.reachable == {"start", "node_0"}

    def test_missing_choice_target_is_error(self):
        result = validate(
            "# start\nA：Hello\nB.Go left>>left\nB.Go right>>right\n"  # noqa: RUF001
            "# left\nA：You went left\n【返回标题】"  # noqa: RUF001
        )
        assert not result.is_valid
        assert result.errors == ["Node 'start' links to missing node 'right'"]

    def test_end_sentinel_is_not_a_missing_node(self):
        script = CompiledScript({"start": ScriptNode("start", next_id=END)})
        assert ScriptGraphValidator().validate(script).is_valid

    def test_missing_start(self):
        result = ScriptGraphValidator().validate(CompiledScript({}))
        assert not result.is_valid
        assert "no start node" in result.errors[0]

    def test_unreachable_node_warns(self):
        result = validate(
            "A：Pick\nA.Stay>>stay\n# stay\nA：Stayed\n【返回标题】\n"  # noqa: RUF001
            "# orphan\nA：Nobody comes here\n【返回标题】"  # noqa: RUF001
        )
        assert result.is_valid
        assert "Node 'orphan' is unreachable from start" in result.warnings

    def test_reachable_terminal_warns(self):
        result = validate("A：Only line")  # noqa: RUF001
        assert result.is_valid
        assert len(result.warnings) == 1
        assert "'start' has no successor" in result.warnings[0]

    def test_cycles_terminate(self):
        script = CompiledScript(
            {
                "start": ScriptNode("start", next_id="loop"),
                "loop": ScriptNode("loop", choices=(Choice("A.Again", "start"),)),
            }
        )
        result = ScriptGraphValidator().validate(script)
        assert result.is_valid
        assert result.reachable == {"start", "loop"}

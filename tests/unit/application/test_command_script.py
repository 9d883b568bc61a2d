"""Unit tests for the command script interpreter."""

import pytest

from seqstore.application.command_script import ScriptRunner
from seqstore.application.sequence_store import SequenceStore
from seqstore.domain.errors import ScriptError

pytestmark = pytest.mark.unit


@pytest.fixture
def output() -> list[str]:
    return []


@pytest.fixture
def runner(store: SequenceStore, output: list[str]) -> ScriptRunner:
    return ScriptRunner(store, output.append)


class TestScriptRunner:
    def test_walkthrough_script(self, runner: ScriptRunner, output: list[str]) -> None:
        executed = runner.run(
            [
                "# two records, free the first, reuse it",
                "insert ACGT",
                "insert ACGTA",
                "",
                "remove $1",
                "print",
                "insert TT",
                "print",
                "get $3",
                "get $2",
            ]
        )
        assert executed == 8
        assert output == ["0:1:4", "1:2:5", "[0, 1]", "0:1:2", "(empty)", "TT", "ACGTA"]

    def test_handle_tokens_accepted(self, runner: ScriptRunner, output: list[str]) -> None:
        runner.run(["insert GATTACA", "get 0:2:7", "remove 0:2:7", "print"])
        assert output == ["0:2:7", "GATTACA", "(empty)"]

    def test_commands_are_case_insensitive(self, runner: ScriptRunner, output: list[str]) -> None:
        runner.run(["INSERT acgt", "Print"])
        assert output == ["0:1:4", "(empty)"]

    def test_unknown_command(self, runner: ScriptRunner) -> None:
        with pytest.raises(ScriptError, match="line 2: unknown command 'delete'"):
            runner.run(["insert A", "delete $1"])

    def test_missing_sequence(self, runner: ScriptRunner) -> None:
        with pytest.raises(ScriptError, match="insert requires a sequence"):
            runner.run(["insert"])

    def test_bad_reference(self, runner: ScriptRunner) -> None:
        with pytest.raises(ScriptError, match=r"\$2 does not name"):
            runner.run(["insert A", "get $2"])
        with pytest.raises(ScriptError, match="bad handle reference"):
            runner.run(["get $x"])
        with pytest.raises(ScriptError, match="missing handle reference"):
            runner.run(["remove"])

    def test_domain_errors_carry_line_number(self, runner: ScriptRunner) -> None:
        with pytest.raises(ScriptError, match="line 3: Invalid nucleotide") as exc_info:
            runner.run(["insert A", "# comment", "insert ANA"])
        assert exc_info.value.line_no == 3

    def test_malformed_token(self, runner: ScriptRunner) -> None:
        with pytest.raises(ScriptError, match="line 1: Malformed handle token"):
            runner.run(["get 1:2"])

    def test_earlier_commands_stay_applied(
        self, runner: ScriptRunner, store: SequenceStore
    ) -> None:
        with pytest.raises(ScriptError):
            runner.run(["insert ACGT", "insert XX"])
        assert store.extent == 1

"""Tests for external command execution"""

import sys

import pytest

from gentup.core.errors import CommandFailed
from gentup.core.runner import (
    CommandSpec, ExecutionMode, ShellOutResult, Spinner, must_succeed, run,
)


def python(code: str, label: str = '') -> CommandSpec:
    """A command running a Python snippet with the test interpreter."""
    return CommandSpec(program=sys.executable, args=('-c', code), label=label)


class TestCommandSpec:

    def test_parse_splits_on_whitespace(self):
        spec = CommandSpec.parse("emerge  --quiet -1v   sys-apps/portage", "Upgrading")
        assert spec.program == 'emerge'
        assert spec.args == ('--quiet', '-1v', 'sys-apps/portage')
        assert spec.label == 'Upgrading'
        assert spec.argv == ['emerge', '--quiet', '-1v', 'sys-apps/portage']

    def test_parse_does_not_interpret_quotes(self):
        spec = CommandSpec.parse('echo "a b"')
        assert spec.args == ('"a', 'b"')

    def test_parse_empty(self):
        with pytest.raises(ValueError):
            CommandSpec.parse('   ')

    def test_str(self):
        assert str(CommandSpec.parse("eix -u sys-devel/gcc")) == 'eix -u sys-devel/gcc'

    def test_immutable(self):
        spec = CommandSpec.parse("eix-sync")
        with pytest.raises(AttributeError):
            spec.program = 'rm'


class TestRun:

    def test_captured_returns_stdout(self):
        result = run(python("print('hello')"), ExecutionMode.CAPTURED, progress=False)
        assert result.ok
        assert result.returncode == 0
        assert result.output == 'hello\n'

    def test_captured_with_label_off_tty(self):
        result = run(python("print('x')", label='Checking'), ExecutionMode.CAPTURED)
        assert result.output == 'x\n'

    def test_silent_captures_stderr_too(self, capfd):
        result = run(python("import sys; print('out'); print('err', file=sys.stderr)"),
                     ExecutionMode.SILENT)
        assert result.output == 'out\n'
        captured = capfd.readouterr()
        assert 'err' not in captured.err
        assert 'out' not in captured.out

    def test_interactive_captures_nothing(self):
        result = run(python("print('shown')"), ExecutionMode.INTERACTIVE)
        assert result.ok
        assert result.output == ''

    def test_nonzero_exit_is_not_an_error(self):
        result = run(python("import sys; sys.exit(3)"), ExecutionMode.SILENT)
        assert result.ok
        assert result.returncode == 3

    @pytest.mark.parametrize('mode', list(ExecutionMode))
    def test_spawn_failure(self, mode):
        spec = CommandSpec.parse("gentup-no-such-program --flag")
        result = run(spec, mode)
        assert not result.ok
        assert isinstance(result.error, OSError)


class TestMustSucceed:

    def test_returns_output(self):
        spec = CommandSpec.parse("eix-sync")
        assert must_succeed(ShellOutResult(output='done\n'), spec) == 'done\n'

    def test_nonzero_exit_is_fatal(self):
        spec = CommandSpec.parse("eix-sync")
        with pytest.raises(CommandFailed) as exc:
            must_succeed(ShellOutResult(returncode=1), spec)
        assert 'eix-sync' in str(exc.value)
        assert 'status 1' in str(exc.value)

    def test_spawn_error_is_fatal(self):
        spec = CommandSpec.parse("eix-sync")
        error = FileNotFoundError(2, 'No such file or directory')
        with pytest.raises(CommandFailed) as exc:
            must_succeed(ShellOutResult(returncode=1, error=error), spec)
        assert exc.value.result.error is error
        assert 'eix-sync' in str(exc.value)


class TestSpinner:

    def test_clears_line(self, tmp_path):
        with open(tmp_path / 'tty', 'w+', newline='') as stream:
            with Spinner('Syncing package tree', stream=stream):
                pass
            stream.seek(0)
            text = stream.read()
        assert 'Syncing package tree' in text
        assert text.endswith('\r\033[K')

"""Tests for CLI"""

import pytest

from gentup.cli import commands
from gentup.cli.commands.setup import cmd_setup
from gentup.cli.main import create_parser, main
from gentup.cli.prompt import Answer, parse_answer
from gentup.core.config import Settings, read_config
from gentup.core.runner import ExecutionMode, ShellOutResult


class TestParser:
    """Tests for argument parser."""

    def test_version_flag(self):
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(['--version'])

    def test_defaults(self):
        parser = create_parser()
        args = parser.parse_args([])
        assert args.cleanup is False
        assert args.force is False
        assert args.notrim is False
        assert args.setup is False

    def test_short_flags(self):
        parser = create_parser()
        args = parser.parse_args(['-b', '-c', '-f', '-o', '-u'])
        assert args.background is True
        assert args.cleanup is True
        assert args.force is True
        assert args.optional is True
        assert args.unattended is True

    def test_notrim_aliases(self):
        parser = create_parser()
        assert parser.parse_args(['-n']).notrim is True
        assert parser.parse_args(['-t']).notrim is True
        assert parser.parse_args(['--notrim']).notrim is True

    def test_unknown_flag(self):
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(['--frobnicate'])


class TestParseAnswer:

    @pytest.mark.parametrize('text,expected', [
        ('', Answer.PROCEED),
        ('y', Answer.PROCEED),
        ('yes', Answer.PROCEED),
        ('s', Answer.SKIP),
        ('n', Answer.SKIP),
        ('q', Answer.QUIT),
        ('Quit', Answer.QUIT),
    ])
    def test_answers(self, text, expected):
        assert parse_answer(text) == expected


class TestMain:

    def test_requires_root(self, monkeypatch, capsys):
        monkeypatch.setenv('USER', 'larry')
        assert main(['--nocolor']) == 1
        assert 'You need to be root' in capsys.readouterr().err

    def test_routes_to_update(self, monkeypatch):
        monkeypatch.setenv('USER', 'root')
        seen = []
        monkeypatch.setattr(commands, 'cmd_update', lambda args: seen.append(args) or 0)
        assert main(['--nocolor', '--force']) == 0
        assert seen[0].force is True

    def test_routes_to_setup(self, monkeypatch):
        monkeypatch.setenv('USER', 'root')
        monkeypatch.setattr(commands, 'cmd_update', lambda args: pytest.fail('update ran'))
        monkeypatch.setattr(commands, 'cmd_setup', lambda args: 0)
        assert main(['--nocolor', '--setup']) == 0

    def test_keyboard_interrupt(self, monkeypatch):
        monkeypatch.setenv('USER', 'root')

        def interrupted(args):
            raise KeyboardInterrupt

        monkeypatch.setattr(commands, 'cmd_update', interrupted)
        assert main(['--nocolor']) == 130

    def test_unexpected_error(self, monkeypatch, capsys):
        monkeypatch.setenv('USER', 'root')

        def broken(args):
            raise RuntimeError('boom')

        monkeypatch.setattr(commands, 'cmd_update', broken)
        assert main(['--nocolor']) == 1
        assert 'Error: boom' in capsys.readouterr().err


class TestSetup:

    @pytest.fixture
    def settings(self, tmp_path):
        return Settings(
            package_file=tmp_path / 'default' / 'gentup',
            config_file=tmp_path / 'conf.d' / 'gentup',
        )

    def test_creates_both_files(self, settings):
        calls = []
        runner = lambda spec, mode: calls.append(str(spec)) or ShellOutResult()
        assert cmd_setup(None, settings=settings, confirm=lambda p: Answer.SKIP,
                         runner=runner) == 0
        assert read_config(settings.config_file) == {'clean_default': False,
                                                     'trim_default': False}
        assert 'app-misc/tmux' in settings.package_file.read_text()
        assert calls == []

    def test_edits_on_request(self, settings):
        calls = []

        def runner(spec, mode):
            calls.append((str(spec), mode))
            return ShellOutResult()

        assert cmd_setup(None, settings=settings, confirm=lambda p: Answer.PROCEED,
                         runner=runner) == 0
        assert calls == [
            (f'vi {settings.config_file}', ExecutionMode.INTERACTIVE),
            (f'vi {settings.package_file}', ExecutionMode.INTERACTIVE),
        ]

    def test_quit_stops_setup(self, settings):
        assert cmd_setup(None, settings=settings, confirm=lambda p: Answer.QUIT) == 0
        assert settings.config_file.exists()
        assert not settings.package_file.exists()

    def test_keeps_existing_config(self, settings):
        settings.config_file.parent.mkdir(parents=True)
        settings.config_file.write_text('trim_default: true\n')
        cmd_setup(None, settings=settings, confirm=lambda p: Answer.SKIP)
        assert settings.config_file.read_text() == 'trim_default: true\n'

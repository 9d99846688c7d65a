"""
Tests for the PactStub CLI

Tests argument parsing and the validate command. The serve and echo
commands block until interrupted, so only their failure paths are run.
"""

import tempfile
from pathlib import Path

import pytest

from pactstub import cli


class TestParser:
    """Test argument parsing."""

    def test_serve_options(self):
        """Test serve arguments."""
        args = cli.build_parser().parse_args([
            'serve', 'pact.json', '--port', '9000', '--no-match-body',
            '--provider-state', 'a widget exists'
        ])

        assert args.command == 'serve'
        assert args.locator == 'pact.json'
        assert args.port == 9000
        assert args.no_match_body is True
        assert args.provider_state == 'a widget exists'

    def test_echo_default_status(self):
        """Test echo defaults to 200."""
        args = cli.build_parser().parse_args(['echo'])

        assert args.status == 200
        assert args.port is None

    def test_no_command(self, capsys):
        """Test running without a command prints help and exits."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])

        assert exc_info.value.code == 1
        assert 'serve' in capsys.readouterr().out


class TestValidate:
    """Test the validate command."""

    def test_valid_pact(self, capsys, sample_pact_text):
        """Test a valid pact file is summarized."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / 'pact.json'
            path.write_text(sample_pact_text)

            cli.main(['validate', str(path)])

        out = capsys.readouterr().out
        assert 'Consumer: WidgetClient' in out
        assert 'Interactions: 6' in out
        assert 'GET /widgets/1 -> 404  get missing widget [no widgets exist]' in out
        assert 'Pact is valid JSON' in out

    def test_inline_json(self, capsys):
        """Test validating JSON text."""
        cli.main(['validate', '{"interactions": []}'])

        assert 'Interactions: 0' in capsys.readouterr().out

    def test_invalid_pact(self, capsys):
        """Test invalid JSON exits with status 1."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / 'broken.json'
            path.write_text('{"interactions": [')

            with pytest.raises(SystemExit) as exc_info:
                cli.main(['validate', str(path)])

        assert exc_info.value.code == 1
        assert 'not a valid JSON document' in capsys.readouterr().out

    def test_missing_file(self, capsys):
        """Test a missing file exits with status 1."""
        with pytest.raises(SystemExit):
            cli.main(['validate', '/no/such/pact.json'])

        assert 'not found' in capsys.readouterr().out


class TestServeFailures:
    """Test serve and echo failure paths."""

    def test_serve_invalid_pact(self, capsys):
        """Test serve exits when the pact is invalid."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(['serve', '{"broken": ', '--port', '0', '--log-level', 'error'])

        assert exc_info.value.code == 1
        assert 'Failed to start stub' in capsys.readouterr().out

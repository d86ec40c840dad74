"""Smoke tests for CLI commands.

Tests that CLI commands parse correctly and don't crash. Uses Click's
CliRunner with the MIDI port, engine and gamepad mocked out.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from xinputdj.cli.main import cli, resolve_log_path
from xinputdj.core import ExitReason
from xinputdj.exceptions import MidiPortNotFoundError
from xinputdj.models import AppConfig, default_mapping, load_mapping
from xinputdj.utils.paths import get_log_dir


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_path(tmp_path: Path):
    """Point the config commands at a temporary config file."""
    path = tmp_path / "config.json"
    with patch('xinputdj.cli.commands.config.get_config_path', return_value=path), \
         patch('xinputdj.cli.commands.mapping.get_config_path', return_value=path):
        yield path


@pytest.fixture
def run_mocks(tmp_path: Path):
    """Mock everything the run command touches outside the process."""
    with patch('xinputdj.cli.main.setup_logging', return_value=tmp_path / "xinputdj.log"), \
         patch.object(AppConfig, 'load_or_default', return_value=AppConfig()), \
         patch.object(AppConfig, 'save') as mock_save, \
         patch('xinputdj.midi.MidiOutputManager') as mock_midi, \
         patch('xinputdj.core.MappingEngine') as mock_engine, \
         patch('xinputdj.input.GamepadPoller') as mock_poller:
        mock_engine.return_value.is_running = False
        mock_engine.return_value.exit_reason = ExitReason.INPUT_CLOSED
        mock_engine.return_value.failure = None
        yield {
            "save": mock_save,
            "midi": mock_midi.return_value,
            "engine": mock_engine,
            "poller": mock_poller,
        }


@pytest.mark.integration
class TestCLIHelp:
    """Test that all commands have working help text."""

    def test_main_help(self, runner):
        """Test main CLI help displays."""
        result = runner.invoke(cli, ['--help'])
        assert result.exit_code == 0
        assert 'XInputDJ' in result.output
        assert '--port' in result.output
        assert '--save-port' in result.output

    def test_version_flag(self, runner):
        """Test --version flag works."""
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert '0.1.0' in result.output

    @pytest.mark.parametrize("group", ['run', 'midi', 'gamepad', 'config', 'mapping'])
    def test_command_help(self, runner, group):
        """Every command group has help."""
        result = runner.invoke(cli, [group, '--help'])
        assert result.exit_code == 0


@pytest.mark.integration
class TestRunCommand:
    """Test the default run command with hardware mocked."""

    def test_no_port_selected(self, runner, run_mocks):
        """Without --port or a saved port the run is refused."""
        result = runner.invoke(cli, [])
        assert result.exit_code == 2
        assert 'No MIDI port selected' in result.output
        run_mocks["engine"].assert_not_called()

    def test_runs_until_input_ends(self, runner, run_mocks):
        """Engine and poller are started and torn down."""
        result = runner.invoke(cli, ['--port', 'loopMIDI Port'])

        assert result.exit_code == 0, result.output
        assert "Gamepad input ended" in result.output
        run_mocks["midi"].open.assert_called_once_with('loopMIDI Port')
        run_mocks["engine"].return_value.start.assert_called_once()
        run_mocks["poller"].return_value.start.assert_called_once()
        run_mocks["poller"].return_value.stop.assert_called_once()
        run_mocks["engine"].return_value.stop.assert_called_once()
        run_mocks["midi"].stop.assert_called_once()
        run_mocks["save"].assert_not_called()

    def test_engine_failure_is_reported(self, runner, run_mocks):
        """A dispatch loop that died shows the error banner instead of a normal exit."""
        engine = run_mocks["engine"].return_value
        engine.exit_reason = ExitReason.FAILED
        engine.failure = ValueError("left deck is on controller 99")

        result = runner.invoke(cli, ['--port', 'loopMIDI Port'])

        assert result.exit_code == 1
        assert "ValueError: left deck is on controller 99" in result.output
        assert "Gamepad input ended" not in result.output
        engine.stop.assert_called_once()
        run_mocks["midi"].stop.assert_called_once()

    def test_run_subcommand(self, runner, run_mocks):
        """'xinputdj run' behaves like the default command."""
        result = runner.invoke(cli, ['run', '--port', 'loopMIDI Port'])
        assert result.exit_code == 0, result.output
        run_mocks["midi"].open.assert_called_once_with('loopMIDI Port')

    def test_save_port(self, runner, run_mocks):
        """--save-port persists the chosen port after a successful start."""
        result = runner.invoke(cli, ['--port', 'loopMIDI Port', '--save-port'])
        assert result.exit_code == 0, result.output
        run_mocks["save"].assert_called_once()

    def test_poller_uses_config(self, runner, run_mocks):
        """The poller is built from config values and the engine's channel."""
        runner.invoke(cli, ['--port', 'loopMIDI Port'])

        channel = run_mocks["engine"].return_value.start.return_value
        run_mocks["poller"].assert_called_once_with(
            channel, joystick_index=0, poll_interval=0.016, trigger_threshold=0.5, layout="xbox",
        )

    def test_port_not_found(self, runner, run_mocks):
        """A missing port shows a short error and the available ports."""
        run_mocks["midi"].open.side_effect = MidiPortNotFoundError('nope', ['loopMIDI Port'])

        result = runner.invoke(cli, ['--port', 'nope'])

        assert result.exit_code == 1
        assert 'MIDI port nope not found' in result.output
        assert 'loopMIDI Port' in result.output
        run_mocks["save"].assert_not_called()


@pytest.mark.integration
class TestMidiCommand:
    """Test MIDI commands."""

    @patch('xinputdj.cli.commands.midi.MidiOutputManager.list_ports')
    def test_midi_list(self, mock_list, runner):
        """Ports are listed with their index."""
        mock_list.return_value = ['loopMIDI Port', 'Microsoft GS Wavetable Synth']
        result = runner.invoke(cli, ['midi', 'list'])
        assert result.exit_code == 0
        assert '[0] loopMIDI Port' in result.output
        assert '[1] Microsoft GS Wavetable Synth' in result.output

    @patch('xinputdj.cli.commands.midi.MidiOutputManager.list_ports', return_value=[])
    def test_midi_list_empty(self, mock_list, runner):
        """An empty port list is reported."""
        result = runner.invoke(cli, ['midi', 'list'])
        assert result.exit_code == 0
        assert 'No MIDI output ports found' in result.output


@pytest.mark.integration
class TestGamepadCommand:
    """Test gamepad commands."""

    @patch('pygame.joystick')
    def test_gamepad_list(self, mock_joystick, runner):
        """Detected gamepads are listed."""
        mock_joystick.get_count.return_value = 1
        pad = mock_joystick.Joystick.return_value
        pad.get_name.return_value = 'Xbox Wireless Controller'
        pad.get_numaxes.return_value = 6
        pad.get_numbuttons.return_value = 11
        pad.get_numhats.return_value = 1

        result = runner.invoke(cli, ['gamepad', 'list'])

        assert result.exit_code == 0
        assert '[0] Xbox Wireless Controller (6 axes, 11 buttons, 1 hats)' in result.output
        mock_joystick.quit.assert_called_once()


@pytest.mark.integration
class TestConfigCommand:
    """Test config commands against a temporary config file."""

    def test_path(self, runner, config_path):
        """The config path is printed."""
        result = runner.invoke(cli, ['config', 'path'])
        assert result.exit_code == 0
        assert str(config_path) in result.output

    def test_show_defaults(self, runner, config_path):
        """Defaults are shown when no file exists."""
        result = runner.invoke(cli, ['config', 'show'])
        assert result.exit_code == 0
        assert 'not created yet' in result.output
        assert 'deadzone: 0.75' in result.output
        assert not config_path.exists()

    @patch('xinputdj.cli.commands.config.MidiOutputManager.list_ports', return_value=['loopMIDI Port'])
    def test_set_port(self, mock_list, runner, config_path):
        """set-port saves only the port."""
        result = runner.invoke(cli, ['config', 'set-port', 'loopMIDI Port'])

        assert result.exit_code == 0
        assert 'Warning' not in result.output
        saved = json.loads(config_path.read_text())
        assert saved['default_midi_port'] == 'loopMIDI Port'
        assert saved['deadzone'] == 0.75

    @patch('xinputdj.cli.commands.config.MidiOutputManager.list_ports', return_value=[])
    def test_set_unknown_port_warns(self, mock_list, runner, config_path):
        """Unknown ports are saved with a warning."""
        result = runner.invoke(cli, ['config', 'set-port', 'Later Port'])
        assert result.exit_code == 0
        assert 'Warning' in result.output
        assert AppConfig.load_or_default(config_path).default_midi_port == 'Later Port'

    def test_reset(self, runner, config_path):
        """reset writes defaults after confirmation."""
        AppConfig(default_midi_port='old').save(config_path)

        result = runner.invoke(cli, ['config', 'reset'], input='y\n')

        assert result.exit_code == 0
        assert AppConfig.load_or_default(config_path).default_midi_port is None

    def test_reset_aborted(self, runner, config_path):
        """Declining the confirmation leaves the file alone."""
        AppConfig(default_midi_port='old').save(config_path)

        result = runner.invoke(cli, ['config', 'reset'], input='n\n')

        assert result.exit_code != 0
        assert AppConfig.load_or_default(config_path).default_midi_port == 'old'

    def test_corrupted_config(self, runner, config_path):
        """A broken config file is reported, not overwritten."""
        config_path.write_text('{broken')

        result = runner.invoke(cli, ['config', 'show'])

        assert result.exit_code == 1
        assert 'Error' in result.output
        assert config_path.read_text() == '{broken'

    def test_validate_defaults(self, runner, config_path):
        """Without a config file the defaults are reported as valid."""
        result = runner.invoke(cli, ['config', 'validate'])
        assert result.exit_code == 0
        assert '[OK]' in result.output
        assert 'defaults apply' in result.output

    def test_validate_saved_config(self, runner, config_path):
        """A saved config using the built-in mapping passes."""
        AppConfig(default_midi_port='loopMIDI Port').save(config_path)

        result = runner.invoke(cli, ['config', 'validate'])

        assert result.exit_code == 0
        assert '[FAIL]' not in result.output
        assert 'built-in default' in result.output

    def test_validate_corrupted_config(self, runner, config_path):
        """A broken config file fails validation."""
        config_path.write_text('{broken')

        result = runner.invoke(cli, ['config', 'validate'])

        assert result.exit_code == 1
        assert '[FAIL]' in result.output

    def test_validate_missing_mapping_file(self, runner, config_path, tmp_path):
        """A configured mapping file that is gone fails validation."""
        missing = tmp_path / 'gone.json'
        AppConfig(mapping_file=missing).save(config_path)

        result = runner.invoke(cli, ['config', 'validate'])

        assert result.exit_code == 1
        assert f'[FAIL] {missing}: File not found' in result.output


@pytest.mark.integration
class TestMappingCommand:
    """Test mapping commands."""

    def test_show(self, runner, config_path):
        """The default table is printed per layer and deck."""
        result = runner.invoke(cli, ['mapping', 'show'])
        assert result.exit_code == 0
        assert '[primary]' in result.output
        assert '[secondary]' in result.output
        assert 'EQ high' in result.output
        assert 'common deck (channel 16)' in result.output

    def test_show_one_layer(self, runner, config_path):
        """--layer limits the output."""
        result = runner.invoke(cli, ['mapping', 'show', '--layer', 'secondary'])
        assert result.exit_code == 0
        assert '[primary]' not in result.output
        assert 'Library scroll' in result.output

    def test_export(self, runner, tmp_path):
        """export writes a loadable table."""
        path = tmp_path / 'mapping.json'
        result = runner.invoke(cli, ['mapping', 'export', str(path)])
        assert result.exit_code == 0
        assert load_mapping(path) == default_mapping()

    def test_show_custom_mapping(self, runner, config_path, tmp_path):
        """A configured mapping file replaces the default table."""
        path = tmp_path / 'mapping.json'
        runner.invoke(cli, ['mapping', 'export', str(path)])
        text = path.read_text().replace('"name": "default"', '"name": "custom"')
        path.write_text(text)
        AppConfig(mapping_file=path).save(config_path)

        result = runner.invoke(cli, ['mapping', 'show'])

        assert result.exit_code == 0
        assert 'Mapping: custom' in result.output


@pytest.mark.unit
class TestLogPath:
    """Test log file selection."""

    def test_default(self):
        """Without flags logs go to the app directory."""
        assert resolve_log_path(False, None) == get_log_dir() / "xinputdj.log"

    def test_debug(self):
        """--debug logs to the working directory."""
        assert resolve_log_path(True, None) == Path.cwd() / "xinputdj-debug.log"

    def test_custom_file_wins(self, tmp_path):
        """--log-file overrides both."""
        custom = tmp_path / "session.log"
        assert resolve_log_path(True, custom) == custom

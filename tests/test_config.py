"""
Tests for configuration loading and merging.
"""

import dataclasses

import pytest

from ntpclient.config import (
    ClientConfig,
    ConfigError,
    DEFAULT_SECRET_KEY,
    DEFAULT_SERVER,
    build_config,
    default_config,
    load_config,
)


class TestLoadConfig:
    """TOML file loading."""

    def test_no_path_gives_defaults(self):
        assert load_config(None) == default_config()

    def test_missing_file_gives_defaults(self, tmp_path, caplog):
        config = load_config(str(tmp_path / 'absent.toml'))
        assert config == default_config()
        assert 'not found' in caplog.text

    def test_reads_toml(self, tmp_path):
        path = tmp_path / 'ntpclient.toml'
        path.write_text(
            'servers = ["time.google.com", "time.cloudflare.com"]\n'
            '\n'
            '[display]\n'
            'loop = 10\n'
            'cls = true\n'
            '\n'
            '[device]\n'
            'secret_key = "FromFile"\n'
        )

        config = load_config(str(path))

        assert config['servers'] == ['time.google.com', 'time.cloudflare.com']
        assert config['display'] == {'loop': 10, 'cls': True}
        assert config['device']['secret_key'] == 'FromFile'

    def test_malformed_toml_raises_config_error(self, tmp_path):
        path = tmp_path / 'broken.toml'
        path.write_text('[display\nloop = = 3\n')

        with pytest.raises(ConfigError, match='Cannot read config file'):
            load_config(str(path))

    def test_directory_path_raises_config_error(self, tmp_path):
        with pytest.raises(ConfigError, match='Cannot read config file'):
            load_config(str(tmp_path))


class TestBuildConfig:
    """Merging file values with command-line values."""

    def test_defaults(self):
        config = build_config({})

        assert config.servers == (DEFAULT_SERVER,)
        assert config.servers == ('pool.ntp.org',)
        assert config.loop == 0
        assert config.cls is False
        assert config.command is None
        assert config.secret_key == DEFAULT_SECRET_KEY == 'MySecretKey123'
        assert config.device_port == 123
        assert config.device_timeout == 2.0
        assert not config.looping

    def test_default_dictionary_matches_dataclass_defaults(self):
        assert build_config(default_config()) == ClientConfig()

    def test_command_line_servers_win(self):
        file_config = {'servers': ['from.file']}
        config = build_config(file_config, servers=['a.example', 'b.example'])
        assert config.servers == ('a.example', 'b.example')

    def test_file_servers_used_without_positionals(self):
        config = build_config({'servers': ['from.file']}, servers=[])
        assert config.servers == ('from.file',)

    def test_single_server_string_in_file(self):
        config = build_config({'servers': 'from.file'})
        assert config.servers == ('from.file',)

    def test_empty_server_list_falls_back_to_pool(self):
        config = build_config({'servers': []}, servers=[])
        assert config.servers == ('pool.ntp.org',)

    def test_loop_from_command_line_overrides_file(self):
        file_config = {'display': {'loop': 30}}
        assert build_config(file_config).loop == 30
        assert build_config(file_config, loop=0).loop == 0
        assert build_config(file_config, loop=5).looping

    def test_cls_from_either_source(self):
        assert build_config({}, cls=True).cls
        assert build_config({'display': {'cls': True}}).cls
        assert build_config({'display': {'cls': False}}).cls is False

    @pytest.mark.parametrize('value', ['false', 'true', 0, 1])
    def test_non_boolean_cls_rejected(self, value):
        with pytest.raises(ConfigError, match='display.cls'):
            build_config({'display': {'cls': value}})

    def test_secret_key_precedence(self):
        file_config = {'device': {'secret_key': 'FromFile'}}
        assert build_config(file_config).secret_key == 'FromFile'
        assert build_config(file_config, secret_key='FromFlag').secret_key == 'FromFlag'

    def test_negative_loop_rejected(self):
        with pytest.raises(ConfigError, match='display.loop'):
            build_config({'display': {'loop': -1}})

    def test_non_integer_loop_rejected(self):
        with pytest.raises(ConfigError):
            build_config({'display': {'loop': 'often'}})

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ConfigError, match='device.timeout'):
            build_config({'device': {'timeout': 0}})

    def test_config_is_immutable(self):
        config = build_config({})
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.loop = 5

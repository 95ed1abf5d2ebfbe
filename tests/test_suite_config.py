"""Tests for suite YAML loading and test credentials."""

import logging
import os

from src.shared.suite_config import (
    CONFIG_PATH,
    Credentials,
    get_section,
    load_environment,
    load_suite_config,
)


class TestLoadSuiteConfig:
    """load_suite_config() never raises on a bad file."""

    def test_shipped_config_loads(self):
        config = load_suite_config(CONFIG_PATH)

        assert config['site'] == 'favbet'
        assert config['session']['ttl_hours'] == 24
        assert config['poll']['interval'] == 0.5

    def test_env_var_selects_config_file(self, tmp_path, monkeypatch):
        path = tmp_path / "staging.yaml"
        path.write_text("site: staging\n", encoding='utf-8')
        monkeypatch.setenv('SUITE_CONFIG', str(path))

        assert load_suite_config()['site'] == 'staging'
        assert load_suite_config(CONFIG_PATH)['site'] == 'favbet'

    def test_missing_file_returns_empty(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            assert load_suite_config(tmp_path / "missing.yaml") == {}

        assert 'not found' in caplog.text

    def test_invalid_yaml_returns_empty(self, tmp_path, caplog):
        path = tmp_path / "suite.yaml"
        path.write_text("browser: [unclosed\n", encoding='utf-8')

        with caplog.at_level(logging.WARNING):
            assert load_suite_config(path) == {}

        assert 'Failed to load' in caplog.text

    def test_non_mapping_returns_empty(self, tmp_path):
        path = tmp_path / "suite.yaml"
        path.write_text("- just\n- a list\n", encoding='utf-8')

        assert load_suite_config(path) == {}

    def test_get_section(self):
        config = {'poll': {'interval': 1}, 'timeouts': None, 'site': 'favbet'}

        assert get_section(config, 'poll') == {'interval': 1}
        assert get_section(config, 'timeouts') == {}
        assert get_section(config, 'site') == {}
        assert get_section(config, 'missing') == {}


class TestLoadEnvironment:
    """.env loading never overrides the real environment."""

    def test_dotenv_does_not_override(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("TEST_USER_EMAIL=from-file@example.com\nSENTRY_ENVIRONMENT=ci\n", encoding='utf-8')
        monkeypatch.setenv('TEST_USER_EMAIL', 'from-env@example.com')
        # Registered with monkeypatch so the value loaded from the file is undone
        monkeypatch.setenv('SENTRY_ENVIRONMENT', '')
        monkeypatch.delenv('SENTRY_ENVIRONMENT')

        assert load_environment(env_file) is True

        assert os.environ['TEST_USER_EMAIL'] == 'from-env@example.com'
        assert os.environ['SENTRY_ENVIRONMENT'] == 'ci'


class TestCredentials:
    """Credentials never leak the password."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv('TEST_USER_EMAIL', '  qa@example.com ')
        monkeypatch.setenv('TEST_USER_PASSWORD', 'hunter2')

        credentials = Credentials.from_env()

        assert credentials.email == 'qa@example.com'
        assert credentials.password == 'hunter2'
        assert credentials.is_complete

    def test_missing_env_is_incomplete(self, monkeypatch):
        monkeypatch.delenv('TEST_USER_EMAIL', raising=False)
        monkeypatch.setenv('TEST_USER_PASSWORD', 'hunter2')

        assert not Credentials.from_env().is_complete

    def test_repr_masks_secrets(self):
        credentials = Credentials(email='qa.user@example.com', password='hunter2')

        text = repr(credentials)

        assert 'hunter2' not in text
        assert 'qa.user' not in text
        assert 'q***@example.com' in text

    def test_redacted_email_without_at(self):
        assert Credentials(email='not-an-email').redacted_email == '****'

# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Tests for licensekit.logging module."""

from __future__ import annotations

import logging
from unittest.mock import patch

import licensekit.logging as ll
import structlog
from licensekit.logging import (
    _REDACTED,
    QUIET_LOGGERS,
    _build_secret_values,
    _scrub,
    bound_package,
    configure_logging,
    get_logger,
    redact_sensitive_values,
)


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_default_level_is_info(self) -> None:
        """Default logging level should be INFO."""
        configure_logging()
        assert logging.root.level == logging.INFO

    def test_verbose_sets_debug(self) -> None:
        """Verbose flag should set DEBUG level."""
        configure_logging(verbose=True)
        assert logging.root.level == logging.DEBUG

    def test_quiet_wins_over_verbose(self) -> None:
        """Quiet flag should set WARNING level even with verbose."""
        configure_logging(verbose=True, quiet=True)
        assert logging.root.level == logging.WARNING

    def test_http_loggers_kept_quiet(self) -> None:
        """Per-request HTTP logging is held at WARNING."""
        configure_logging(verbose=True)
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_json_log_does_not_crash(self) -> None:
        """JSON log mode should configure without errors."""
        configure_logging(json_log=True)
        get_logger('licensekit.test').info('test_json', key='value')

    def test_redaction_env_switch(self) -> None:
        """LICENSEKIT_REDACT_SECRETS=0 turns redaction off."""
        event = {'event': 'auth', 'token': 'ghp_secret_value_1'}
        with patch.dict('os.environ', {'GITHUB_TOKEN': 'ghp_secret_value_1', 'LICENSEKIT_REDACT_SECRETS': '0'}):
            configure_logging()
            assert redact_sensitive_values(None, 'info', event) is event
        with patch.dict('os.environ', {'GITHUB_TOKEN': 'ghp_secret_value_1', 'LICENSEKIT_REDACT_SECRETS': '1'}):
            configure_logging()
            assert redact_sensitive_values(None, 'info', event)['token'] == _REDACTED
        configure_logging()

    def test_redact_secrets_argument(self) -> None:
        """redact_secrets=False turns redaction off as well."""
        configure_logging(redact_secrets=False)
        event = {'event': 'ghp_' + 'a' * 36}
        assert redact_sensitive_values(None, 'info', event) is event
        configure_logging()


class TestRedactSensitiveValues:
    """Tests for the structlog redaction processor."""

    def test_redacts_env_token_in_kwargs(self) -> None:
        """A token value in any field is redacted."""
        old = ll._secret_values
        try:
            ll._secret_values = frozenset({'npm_abcdefgh1234'})
            result = redact_sensitive_values(
                None,
                'debug',
                {'event': 'registry_request', 'headers': 'Bearer npm_abcdefgh1234'},
            )
            assert result['headers'] == f'Bearer {_REDACTED}'
            assert result['event'] == 'registry_request'
        finally:
            ll._secret_values = old

    def test_redacts_github_token_shape(self) -> None:
        """GitHub tokens are caught even when not set in the environment."""
        token = 'ghp_' + 'A1b2' * 9
        result = redact_sensitive_values(None, 'warning', {'event': 'github_auth_failed', 'error': f'bad {token}'})
        assert result['error'] == f'bad {_REDACTED}'

    def test_clean_event_unchanged(self) -> None:
        """Events without secrets keep their values."""
        event = {'event': 'resolved', 'license': 'MIT', 'count': 3}
        assert redact_sensitive_values(None, 'info', event) == event

    def test_scrub_returns_non_strings_unchanged(self) -> None:
        """_scrub passes through non-string types."""
        assert _scrub(42) == 42
        assert _scrub(None) is None


class TestBuildSecretValues:
    """Tests for _build_secret_values()."""

    def test_collects_github_token(self) -> None:
        """GITHUB_TOKEN is treated as a secret."""
        with patch.dict('os.environ', {'GITHUB_TOKEN': 'ghp_test_123456'}):
            assert 'ghp_test_123456' in _build_secret_values()

    def test_skips_empty_and_short_values(self) -> None:
        """Values shorter than 8 characters would mangle unrelated text."""
        with patch.dict('os.environ', {'NPM_TOKEN': '', 'PUB_TOKEN': 'abc'}):
            values = _build_secret_values()
        assert '' not in values
        assert 'abc' not in values


class TestBoundPackage:
    """Tests for bound_package()."""

    def test_binds_and_restores(self) -> None:
        """The package is bound inside the block only."""
        with bound_package('left-pad'):
            assert structlog.contextvars.get_contextvars()['package'] == 'left-pad'
        assert 'package' not in structlog.contextvars.get_contextvars()

    def test_nested_binding_restores_outer(self) -> None:
        """Leaving an inner block restores the outer package."""
        with bound_package('outer'):
            with bound_package('inner'):
                assert structlog.contextvars.get_contextvars()['package'] == 'inner'
            assert structlog.contextvars.get_contextvars()['package'] == 'outer'

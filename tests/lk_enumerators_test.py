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

"""Tests for licensekit.enumerators package."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar
from unittest.mock import AsyncMock, patch

import pytest
from licensekit._types import DependencyRecord
from licensekit.config import RunConfig
from licensekit.enumerators import Ecosystem, detect_ecosystem
from licensekit.enumerators.dart import enumerate_dart, load_pubspec, pubspec_records
from licensekit.enumerators.npm import enumerate_npm, npm_ls_args, parse_npm_ls, walk_dependency_tree
from licensekit.errors import EnumerationError

_T = TypeVar('_T')


def _run(coro: Coroutine[object, object, _T]) -> _T:
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


class TestDetectEcosystem:
    """Tests for detect_ecosystem()."""

    def test_node(self, tmp_path: Path) -> None:
        """package.json marks a node project."""
        (tmp_path / 'package.json').write_text('{}', encoding='utf-8')
        eco = detect_ecosystem(tmp_path)
        assert eco is not None
        assert eco.name == 'node'

    def test_dart(self, tmp_path: Path) -> None:
        """pubspec.yaml marks a dart project."""
        (tmp_path / 'pubspec.yaml').write_text('name: app\n', encoding='utf-8')
        eco = detect_ecosystem(tmp_path)
        assert eco is not None
        assert eco.name == 'dart'

    def test_node_wins(self, tmp_path: Path) -> None:
        """With both markers, node is checked first."""
        (tmp_path / 'package.json').write_text('{}', encoding='utf-8')
        (tmp_path / 'pubspec.yaml').write_text('name: app\n', encoding='utf-8')
        eco = detect_ecosystem(tmp_path)
        assert eco is not None
        assert eco.name == 'node'

    def test_none(self, tmp_path: Path) -> None:
        """No marker means no ecosystem."""
        assert detect_ecosystem(tmp_path) is None

    def test_dependencies_deduplicated(self, tmp_path: Path) -> None:
        """Ecosystem.dependencies keeps the first record of each name."""
        first = DependencyRecord(name='a', registry_id='first')
        listed = [first, DependencyRecord(name='b'), DependencyRecord(name='a', registry_id='second')]
        eco = Ecosystem(name='fake', marker='fake.lock', enumerate=AsyncMock(return_value=listed))
        records = _run(eco.dependencies(RunConfig(cwd=tmp_path)))
        assert [r.name for r in records] == ['a', 'b']
        assert records[0] is first


class TestWalkDependencyTree:
    """Tests for walk_dependency_tree()."""

    def test_pre_order_first_seen(self) -> None:
        """Names come out in pre-order, each once."""
        tree = {
            'express': {'dependencies': {'accepts': {'dependencies': {'mime-types': {}}}, 'debug': {}}},
            'debug': {'dependencies': {'ms': {}}},
        }
        assert walk_dependency_tree(tree) == ['express', 'accepts', 'mime-types', 'debug', 'ms']

    def test_empty(self) -> None:
        """An empty or missing tree yields no names."""
        assert walk_dependency_tree({}) == []
        assert walk_dependency_tree(None) == []

    def test_deep_tree(self) -> None:
        """Very deep trees do not hit the recursion limit."""
        tree: dict[str, Any] = {}
        node = tree
        for i in range(5000):
            child: dict[str, Any] = {}
            node[f'p{i}'] = {'dependencies': child}
            node = child
        names = walk_dependency_tree(tree)
        assert len(names) == 5000
        assert names[-1] == 'p4999'


class TestNpm:
    """Tests for npm ls handling."""

    def test_args(self) -> None:
        """--deep asks for the full tree."""
        assert npm_ls_args(deep=False)[-2:] == ['--depth', '0']
        assert npm_ls_args(deep=True)[-2:] == ['--depth', 'Infinity']
        assert '--prod' in npm_ls_args(deep=False)

    def test_parse_invalid(self) -> None:
        """Garbage output is an enumeration error."""
        with pytest.raises(EnumerationError):
            parse_npm_ls('npm ERR! oops')

    def test_parse_no_dependencies(self) -> None:
        """A project without dependencies yields no names."""
        assert parse_npm_ls('{"name": "app"}') == []

    def test_install_locations(self, tmp_path: Path) -> None:
        """Records point into node_modules."""
        out = json.dumps({'dependencies': {'@acme/widget': {}}})
        with patch('licensekit.enumerators.npm.run_npm_ls', AsyncMock(return_value=out)) as run_ls:
            records = _run(enumerate_npm(RunConfig(cwd=tmp_path)))
        run_ls.assert_awaited_once_with(tmp_path, deep=False)
        assert records[0].name == '@acme/widget'
        assert records[0].install_location == tmp_path / 'node_modules' / '@acme/widget'
        assert records[0].registry_id is None


_PUBSPEC = """\
name: app
dependencies:
  http: ^1.0.0
  flutter:
    sdk: flutter
  widget:
    git:
      url: git@github.com:acme/widget.git
      ref: main
  gadget:
    git: https://github.com/acme/gadget.git
dev_dependencies:
  flutter_test:
    sdk: flutter
  http: ^1.1.0
builders:
  build_runner: ^2.0.0
"""


class TestDart:
    """Tests for pubspec.yaml enumeration."""

    def test_records(self, tmp_path: Path) -> None:
        """Sections are merged and each dependency kind is mapped."""
        (tmp_path / 'pubspec.yaml').write_text(_PUBSPEC, encoding='utf-8')
        records = {r.name: r for r in _run(enumerate_dart(RunConfig(cwd=tmp_path)))}
        assert list(records) == ['build_runner', 'http', 'flutter', 'widget', 'gadget', 'flutter_test']
        assert records['http'].registry_id == 'http'
        assert records['flutter'].registry_id == 'flutter'
        assert records['flutter_test'].registry_id == 'flutter'
        assert records['widget'].registry_id is None
        assert records['widget'].repository_url == 'https://github.com/acme/widget'
        assert records['gadget'].repository_url == 'https://github.com/acme/gadget'
        assert all(r.install_location is None for r in records.values())

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty pubspec has no dependencies."""
        (tmp_path / 'pubspec.yaml').write_text('', encoding='utf-8')
        assert pubspec_records(load_pubspec(tmp_path / 'pubspec.yaml')) == []

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Unparseable YAML is an enumeration error."""
        (tmp_path / 'pubspec.yaml').write_text('dependencies: [unclosed', encoding='utf-8')
        with pytest.raises(EnumerationError):
            load_pubspec(tmp_path / 'pubspec.yaml')

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing pubspec is an enumeration error."""
        with pytest.raises(EnumerationError, match='dart'):
            load_pubspec(tmp_path / 'pubspec.yaml')

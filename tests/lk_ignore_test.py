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

"""Tests for licensekit.ignore module."""

from __future__ import annotations

from pathlib import Path

from licensekit._types import DependencyRecord
from licensekit.ignore import IgnorePattern, apply_ignore, is_ignored, load_ignore_patterns, parse_ignore_lines


class TestParseIgnoreLines:
    """Tests for parse_ignore_lines()."""

    def test_comments_and_blanks(self) -> None:
        """Comments and blank lines are skipped."""
        assert parse_ignore_lines(['# internal', '', '  ', 'left-pad']) == [IgnorePattern('left-pad')]

    def test_negation(self) -> None:
        """A leading ! marks a re-include."""
        assert parse_ignore_lines(['!@acme/public']) == [IgnorePattern('@acme/public', negated=True)]

    def test_bare_bang_ignored(self) -> None:
        """A lone ! is not a pattern."""
        assert parse_ignore_lines(['!']) == []


class TestIsIgnored:
    """Tests for is_ignored()."""

    def test_glob(self) -> None:
        """Globs match scoped names."""
        assert is_ignored('@acme/widget', [IgnorePattern('@acme/*')])
        assert not is_ignored('widget', [IgnorePattern('@acme/*')])

    def test_last_match_wins(self) -> None:
        """A later negation re-includes a name."""
        patterns = parse_ignore_lines(['@acme/*', '!@acme/public'])
        assert is_ignored('@acme/private', patterns)
        assert not is_ignored('@acme/public', patterns)

    def test_case_sensitive(self) -> None:
        """Matching is case sensitive on every platform."""
        assert not is_ignored('Left-Pad', [IgnorePattern('left-pad')])


class TestApplyIgnore:
    """Tests for load_ignore_patterns() and apply_ignore()."""

    def test_split(self, tmp_path: Path) -> None:
        """Records are split into kept and ignored, in order."""
        path = tmp_path / '.licenseignore'
        path.write_text('# skip internal\n@acme/*\n!@acme/public\n', encoding='utf-8')
        records = [DependencyRecord(name=n) for n in ('a', '@acme/x', '@acme/public', 'b')]
        kept, ignored = apply_ignore(records, load_ignore_patterns(path))
        assert [r.name for r in kept] == ['a', '@acme/public', 'b']
        assert [r.name for r in ignored] == ['@acme/x']

    def test_missing_file(self, tmp_path: Path) -> None:
        """No ignore file keeps everything."""
        records = [DependencyRecord(name='a')]
        kept, ignored = apply_ignore(records, load_ignore_patterns(tmp_path / '.licenseignore'))
        assert kept == records
        assert ignored == []

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

r"""License names: acceptance filter, page scraping and text detection.

Three small helpers sit between raw metadata and a record's ``license``
field:

- :func:`accept_license_name`: decides whether a manifest/API string
  is a plausible license name rather than free text.
- :func:`scrape_license_from_html`: picks a license id out of a
  registry landing page.
- :func:`detect_license_from_text`: recognises the preamble of a
  local LICENSE file.

None of this is SPDX normalization; values are kept as found.
"""

from __future__ import annotations

import re
from typing import Final

__all__ = [
    'KNOWN_LICENSES',
    'LICENSE_FILE_NAMES',
    'PRIMARY_BRANCH_NAMES',
    'SCRAPE_LICENSE_IDS',
    'accept_license_name',
    'detect_license_from_text',
    'scrape_license_from_html',
]

#: Conventional license file names, checked in this order.
LICENSE_FILE_NAMES: Final[tuple[str, ...]] = (
    'LICENSE',
    'LICENSE.txt',
    'license',
    'License',
    'license.md',
    'License.md',
    'LICENSE.md',
    'LICENSE-MIT.txt',
    'license-mit',
)

#: Default branch names, checked in this order.
PRIMARY_BRANCH_NAMES: Final[tuple[str, ...]] = ('main', 'master')

#: Flat allow-list of license identifiers.
KNOWN_LICENSES: Final[tuple[str, ...]] = (
    '0BSD',
    'AFL-3.0',
    'AGPL-3.0',
    'Apache-2.0',
    'Artistic-2.0',
    'BlueOak-1.0.0',
    'BSD-2-Clause',
    'BSD-3-Clause',
    'BSL-1.0',
    'CC-BY-3.0',
    'CC-BY-4.0',
    'CC0-1.0',
    'CDDL-1.0',
    'EPL-1.0',
    'EPL-2.0',
    'GPL-2.0',
    'GPL-3.0',
    'ISC',
    'LGPL-2.1',
    'LGPL-3.0',
    'MIT',
    'MPL-2.0',
    'OFL-1.1',
    'Python-2.0',
    'Unlicense',
    'WTFPL',
    'Zlib',
)

# A string with one of these and no known id is free text, not a name.
_DISALLOWED_CHARS: Final[frozenset[str]] = frozenset('/"\':')

#: Ids looked for on registry landing pages, in priority order.
SCRAPE_LICENSE_IDS: Final[tuple[str, ...]] = (
    'BSD-3-Clause',
    'BSD-2-Clause',
    'Apache-2.0',
    'MIT',
    'MPL-2.0',
    'GPL-3.0',
    'LGPL-3.0',
    'ISC',
    'Unlicense',
)

_SCRAPE_PATTERNS: Final[tuple[tuple[str, re.Pattern[str]], ...]] = tuple(
    (spdx_id, re.compile(rf'(?<![\w-]){re.escape(spdx_id)}(?![\w-])')) for spdx_id in SCRAPE_LICENSE_IDS
)

# Patterns in LICENSE file content → likely license id.
_LICENSE_FILE_PATTERNS: Final[tuple[tuple[re.Pattern[str], str], ...]] = (
    (re.compile(r'Apache License', re.IGNORECASE), 'Apache-2.0'),
    (re.compile(r'MIT License', re.IGNORECASE), 'MIT'),
    (re.compile(r'Permission is hereby granted, free of charge', re.IGNORECASE), 'MIT'),
    (re.compile(r'BSD 3-Clause', re.IGNORECASE), 'BSD-3-Clause'),
    (re.compile(r'BSD 2-Clause', re.IGNORECASE), 'BSD-2-Clause'),
    (re.compile(r'Redistribution and use in source and binary forms', re.IGNORECASE), 'BSD-3-Clause'),
    (re.compile(r'GNU LESSER GENERAL PUBLIC LICENSE[\s\S]*?Version 3', re.IGNORECASE), 'LGPL-3.0'),
    (re.compile(r'GNU LESSER GENERAL PUBLIC LICENSE[\s\S]*?Version 2\.1', re.IGNORECASE), 'LGPL-2.1'),
    (re.compile(r'GNU AFFERO GENERAL PUBLIC LICENSE[\s\S]*?Version 3', re.IGNORECASE), 'AGPL-3.0'),
    (re.compile(r'GNU GENERAL PUBLIC LICENSE[\s\S]*?Version 3', re.IGNORECASE), 'GPL-3.0'),
    (re.compile(r'GNU GENERAL PUBLIC LICENSE[\s\S]*?Version 2', re.IGNORECASE), 'GPL-2.0'),
    (re.compile(r'Mozilla Public License[\s\S]*?2\.0', re.IGNORECASE), 'MPL-2.0'),
    (re.compile(r'ISC License', re.IGNORECASE), 'ISC'),
    (re.compile(r'The Unlicense', re.IGNORECASE), 'Unlicense'),
    (re.compile(r'Boost Software License', re.IGNORECASE), 'BSL-1.0'),
    (re.compile(r'zlib License', re.IGNORECASE), 'Zlib'),
)


def accept_license_name(value: object) -> str | None:
    """Return *value* if it looks like a license name, else ``None``.

    A string containing a known id (case-sensitive substring) is always
    accepted.  Otherwise it is rejected when it contains a slash, a
    quote or a colon, which catches URLs, ``SEE LICENSE IN ...: ...``
    notes and pasted license text.

    >>> accept_license_name('MIT')
    'MIT'
    >>> accept_license_name('See LICENSE file: http://example.com') is None
    True
    """
    if not isinstance(value, str):
        return None
    name = value.strip()
    if not name:
        return None
    if any(known in name for known in KNOWN_LICENSES):
        return name
    if any(ch in _DISALLOWED_CHARS for ch in name):
        return None
    return name


def scrape_license_from_html(html: str) -> str | None:
    """Return the first of :data:`SCRAPE_LICENSE_IDS` found in *html*."""
    for spdx_id, pattern in _SCRAPE_PATTERNS:
        if pattern.search(html):
            return spdx_id
    return None


def detect_license_from_text(text: str) -> str | None:
    """Guess a license id from the text of a LICENSE file."""
    for pattern, spdx_id in _LICENSE_FILE_PATTERNS:
        if pattern.search(text):
            return spdx_id
    return None

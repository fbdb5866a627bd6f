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

"""Remote metadata clients: the GitHub API and package registries."""

from licensekit.clients.github import GitHubClient, RateLimitStatus, connect_github
from licensekit.clients.registry import (
    PubPackage,
    fetch_landing_page,
    fetch_npm_repository,
    fetch_pub_package,
    pub_landing_page_url,
)

__all__ = [
    'GitHubClient',
    'PubPackage',
    'RateLimitStatus',
    'connect_github',
    'fetch_landing_page',
    'fetch_npm_repository',
    'fetch_pub_package',
    'pub_landing_page_url',
]

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

"""Shared test fakes for bumpkit.

Usage::

    from tests._fakes import FakeVCS, MemoryFiles

    vcs = FakeVCS(commits=['feat: init', 'fix: typo'], tags={'v1.0.0': 1})
    files = MemoryFiles({'pyproject.toml': '[project]\\nversion = "1.0.0"\\n'})
"""

from tests._fakes._files import MemoryFiles as MemoryFiles
from tests._fakes._vcs import FakeVCS as FakeVCS

__all__ = [
    'FakeVCS',
    'MemoryFiles',
]

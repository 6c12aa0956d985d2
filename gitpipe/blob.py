# blob.py -- Reading and writing blobs through git
# Copyright (C) 2025 The gitpipe developers
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# gitpipe is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Reading and writing blobs through git."""

from .hash import Hash
from .process import (
    Git,
    git_dir_args,
    invoke_checked,
    invoke_streams,
    throw_if_error,
)


def read_blob(git: Git, git_dir: str, blob_hash: Hash) -> bytes:
    """Read the contents of a blob.

    Raises:
      GitInvocationError: if git fails or reports anything on stderr, for
        example because the blob does not exist
    """
    args = git_dir_args(git_dir, ["cat-file", "blob", str(blob_hash)])
    with invoke_streams(git, args) as inv:
        inv.stdin.close()
        data = inv.stdout.read()
    throw_if_error(inv)
    return data


def write_blob(git: Git, git_dir: str, data: bytes) -> Hash:
    """Store ``data`` as a blob and return its hash."""
    args = git_dir_args(git_dir, ["hash-object", "-w", "--stdin"])
    result = invoke_checked(git, args, input=data)
    return Hash.from_hex(result.out.strip())

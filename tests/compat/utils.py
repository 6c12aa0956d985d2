# utils.py -- Utilities for tests that run C git
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

"""Utilities for interacting with cgit."""

import os
import shutil
import subprocess
import tempfile
from collections.abc import Sequence
from typing import Optional

from gitpipe.process import Git, default_git

from .. import SkipTest, TestCase

_DEFAULT_GIT = "git"


def git_version(git_path: str = _DEFAULT_GIT) -> Optional[tuple[int, ...]]:
    """Attempt to determine the version of git currently installed.

    Args:
      git_path: Path to the git executable; defaults to the version in
        the system path.
    Returns: A tuple of ints of the form (major, minor, point), or None if no
      git installation was found.
    """
    try:
        _, output = run_git(["--version"], git_path=git_path, capture_stdout=True)
    except OSError:
        return None
    version_prefix = b"git version "
    if not output.startswith(version_prefix):
        return None
    parts = output[len(version_prefix) :].split(b".")
    nums = []
    for part in parts[:3]:
        try:
            nums.append(int(part))
        except ValueError:
            break
    while len(nums) < 3:
        nums.append(0)
    return tuple(nums)


def require_git_version(
    required_version: tuple[int, ...], git_path: str = _DEFAULT_GIT
) -> None:
    """Require git version >= version, or skip the calling test."""
    found_version = git_version(git_path=git_path)
    if found_version is None:
        raise SkipTest(f"Test requires git >= {required_version}, but c git not found")
    if found_version < required_version:
        required = ".".join(map(str, required_version))
        found = ".".join(map(str, found_version))
        raise SkipTest(f"Test requires git >= {required}, found {found}")


def run_git(
    args: Sequence[str],
    git_path: str = _DEFAULT_GIT,
    input: Optional[bytes] = None,
    capture_stdout: bool = False,
    **popen_kwargs,
) -> tuple[int, Optional[bytes]]:
    """Run a git command.

    Input is piped from the input parameter and output is sent to the standard
    streams, unless capture_stdout is set.

    Args:
      args: A list of args to the git command.
      git_path: Path to to the git executable.
      input: Input data to be sent to stdin.
      capture_stdout: Whether to capture and return stdout.
      **popen_kwargs: Additional kwargs for subprocess.Popen;
        stdin/stdout args are ignored.
    Returns: A tuple of (returncode, stdout contents). If capture_stdout is
      False, None will be returned as stdout contents.
    Raises:
      OSError: if the git executable was not found.
    """
    argv = [git_path, *args]
    popen_kwargs["stdin"] = subprocess.PIPE
    if capture_stdout:
        popen_kwargs["stdout"] = subprocess.PIPE
    else:
        popen_kwargs.pop("stdout", None)
    p = subprocess.Popen(argv, **popen_kwargs)
    stdout, _ = p.communicate(input=input)
    return (p.returncode, stdout)


def run_git_or_fail(
    args: Sequence[str],
    git_path: str = _DEFAULT_GIT,
    input: Optional[bytes] = None,
    **popen_kwargs,
) -> bytes:
    """Run a git command, capture stdout/stderr, and fail if git fails."""
    popen_kwargs["stderr"] = subprocess.STDOUT
    returncode, stdout = run_git(
        args, git_path=git_path, input=input, capture_stdout=True, **popen_kwargs
    )
    assert stdout is not None
    if returncode != 0:
        raise AssertionError(
            "git with args {!r} failed with {}: {!r}".format(args, returncode, stdout)
        )
    return stdout


class CompatTestCase(TestCase):
    """Test case that requires git for compatibility checks.

    Subclasses can change the git version required by overriding
    min_git_version.
    """

    min_git_version: tuple[int, ...] = (2, 2, 0)
    git: Git = default_git

    def setUp(self) -> None:
        super().setUp()
        require_git_version(self.min_git_version)

    def make_temp_dir(self) -> str:
        path = tempfile.mkdtemp(prefix="gitpipe-test-")
        self.addCleanup(shutil.rmtree, path)
        return path

    def make_temp_repo(self) -> str:
        """Create an empty bare repository and return its git dir."""
        git_dir = os.path.join(self.make_temp_dir(), "repo.git")
        run_git_or_fail(["init", "--bare", "--quiet", git_dir])
        return git_dir

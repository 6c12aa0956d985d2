# errors.py -- Errors for gitpipe
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

"""gitpipe exception classes."""

from collections.abc import Sequence
from typing import Optional


class FileFormatException(Exception):
    """Base class for exceptions relating to reading git file formats."""


class ObjectFormatException(FileFormatException):
    """Indicates an error parsing an object."""


class TruncatedDataError(ObjectFormatException):
    """Input ended before a complete value could be read."""

    def __init__(
        self, what: str, missing: int, partial: Optional[object] = None
    ) -> None:
        """Initialize a TruncatedDataError.

        Args:
          what: Description of the value being read
          missing: Number of bytes or characters still needed
          partial: The partially parsed value, if any
        """
        self.missing = missing
        self.partial = partial
        message = f"Truncated {what}: {missing} more byte(s) needed"
        if partial is not None:
            message += f" (read so far: {partial!r})"
        super().__init__(message)


class GitInvocationError(Exception):
    """A git invocation finished in a way the caller treats as failure."""

    def __init__(
        self,
        git_args: Sequence[str],
        exit: int,
        err: str,
        summary: str,
        out: str = "",
    ) -> None:
        """Initialize a GitInvocationError.

        Args:
          git_args: Arguments git was invoked with
          exit: Exit code of the git process
          err: Captured standard error
          summary: Human-readable summary of the invocation
          out: Captured standard output, if it was captured
        """
        self.git_args = list(git_args)
        self.exit = exit
        self.err = err
        self.out = out
        self.summary = summary
        super().__init__(summary)


class ContractViolation(TypeError):
    """A function was called with arguments that break its contract.

    This signals a bug in the caller and is not meant to be recovered from.
    """

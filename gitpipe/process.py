# process.py -- Running git as a child process
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

"""Running git as a child process.

Every call spawns a fresh ``git`` process. Two styles are offered:

* :func:`invoke` runs git to completion and captures everything it printed.
* :func:`invoke_streams` hands back git's stdin and stdout for the caller to
  drive while git runs.

Pipe buffers are small, so a process that fills its stderr pipe while the
caller is busy writing stdin or reading stdout would block forever. Streaming
invocations therefore drain stderr on a dedicated thread from the moment the
process starts; that thread also waits for the exit status and resolves the
invocation's ``finish`` future.

Neither call interprets exit codes. :func:`failed`, :func:`if_error`,
:func:`throw_if_error` and :func:`check_result` are there for callers that
treat a non-zero exit or any stderr output as failure.
"""

import shutil
import subprocess
import sys
import threading
from collections.abc import Iterator, Sequence
from concurrent.futures import Future
from contextlib import suppress
from dataclasses import dataclass, field
from typing import IO, Callable, NamedTuple, Optional, TypeVar, Union

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override

from .errors import ContractViolation, GitInvocationError
from .log_utils import getLogger

logger = getLogger(__name__)

T = TypeVar("T")


def find_git_command() -> str:
    """Find command to run for system Git."""
    return shutil.which("git") or "git"


@dataclass(frozen=True)
class Git:
    """The git executable to invoke."""

    path: str = field(default_factory=find_git_command)

    def __post_init__(self) -> None:
        if not isinstance(self.path, str) or not self.path:
            raise ContractViolation(f"invalid git executable: {self.path!r}")


default_git = Git()


class InvokeResult(NamedTuple):
    """Outcome of running git to completion."""

    exit: int
    out: str
    err: str


class Completion(NamedTuple):
    """Outcome of a streaming invocation, available once git has exited."""

    exit: int
    err: str


def is_args(x: object) -> bool:
    """Check that ``x`` is a list or tuple of strings."""
    return isinstance(x, (list, tuple)) and all(isinstance(a, str) for a in x)


def is_invoke_result(x: object) -> bool:
    """Check that ``x`` has the shape of an :func:`invoke` result.

    This says nothing about whether the invocation succeeded.
    """
    return (
        isinstance(x, InvokeResult)
        and isinstance(x.exit, int)
        and isinstance(x.out, str)
        and isinstance(x.err, str)
    )


def _is_completion(x: object) -> bool:
    return isinstance(x, Completion) and isinstance(x.exit, int) and isinstance(
        x.err, str
    )


def git_dir_args(git_dir: str, args: Sequence[str]) -> list[str]:
    """Build arguments for a git invocation against the repository at git_dir."""
    return [f"--git-dir={git_dir}", *args]


def _check_invocation(git: Git, args: Sequence[str]) -> None:
    if not isinstance(git, Git):
        raise ContractViolation(f"not a Git: {git!r}")
    if not is_args(args):
        raise ContractViolation(f"git arguments must be strings: {args!r}")


def _decode(data: bytes) -> str:
    # surrogateescape keeps arbitrary bytes recoverable with the same codec.
    return data.decode("utf-8", "surrogateescape")


def invoke(
    git: Git, args: Sequence[str], input: Optional[bytes] = None
) -> InvokeResult:
    """Run git to completion.

    subprocess.run reads stdout and stderr concurrently while it feeds stdin,
    so arbitrarily large input and output cannot deadlock here.

    Args:
      git: The git executable to run
      args: Arguments to pass to git
      input: Bytes to feed to git's stdin; stdin is empty when None
    Returns: an InvokeResult with git's exit code, stdout and stderr
    """
    _check_invocation(git, args)
    logger.debug("execute: git %s", " ".join(args))
    if input is None:
        p = subprocess.run(
            [git.path, *args], stdin=subprocess.DEVNULL, capture_output=True
        )
    else:
        p = subprocess.run([git.path, *args], input=input, capture_output=True)
    return InvokeResult(p.returncode, _decode(p.stdout), _decode(p.stderr))


def summary(args: Sequence[str], result: Union[InvokeResult, Completion]) -> str:
    """Return a user-readable summary of a git invocation.

    Args:
      args: Arguments git was invoked with
      result: An InvokeResult, or the Completion of a streaming invocation
        (whose stdout belonged to the caller and is left out)
    """
    if not is_args(args):
        raise ContractViolation(f"git arguments must be strings: {args!r}")
    if is_invoke_result(result):
        out = f"stdout:\n{result.out}"
    elif _is_completion(result):
        out = ""
    else:
        raise ContractViolation(f"not an invocation result: {result!r}")
    return (
        f"execute: git {' '.join(args)}\n"
        f"stderr:\n{result.err}"
        f"{out}"
        f"exit: {result.exit}\n"
    )


def invoke_with_summary(
    git: Git, args: Sequence[str], input: Optional[bytes] = None
) -> tuple[InvokeResult, str]:
    """Call :func:`invoke` and return its result together with its summary."""
    result = invoke(git, args, input=input)
    return result, summary(args, result)


def failed(result: Union[InvokeResult, Completion]) -> bool:
    """Check whether git exited non-zero or wrote anything to stderr."""
    return result.exit != 0 or result.err != ""


def check_result(args: Sequence[str], result: InvokeResult) -> InvokeResult:
    """Raise GitInvocationError if ``result`` is a failure, else return it."""
    if failed(result):
        raise GitInvocationError(
            args, result.exit, result.err, summary(args, result), out=result.out
        )
    return result


def invoke_checked(
    git: Git, args: Sequence[str], input: Optional[bytes] = None
) -> InvokeResult:
    """Like :func:`invoke`, but raise GitInvocationError on failure."""
    return check_result(args, invoke(git, args, input=input))


class _StderrReader(threading.Thread):
    """Drains a child's stderr, then reaps it and resolves ``finish``."""

    def __init__(
        self, proc: "subprocess.Popen[bytes]", finish: "Future[Completion]"
    ) -> None:
        super().__init__(name=f"gitpipe-stderr-{proc.pid}", daemon=True)
        self._proc = proc
        self._finish = finish

    @override
    def run(self) -> None:
        assert self._proc.stderr is not None
        try:
            with self._proc.stderr as stderr:
                err = stderr.read()
            exit = self._proc.wait()
        except Exception as e:
            self._finish.set_exception(e)
        else:
            self._finish.set_result(Completion(exit, _decode(err)))


class StreamingInvocation:
    """A running git process whose stdin and stdout belong to the caller.

    The caller writes to :attr:`stdin`, closes it, and reads :attr:`stdout`
    to the end; :attr:`finish` then resolves to a :class:`Completion`.
    A caller that walks away without doing so leaves git (and the stderr
    thread) running. Use the invocation as a context manager, or call
    :meth:`close`, to release everything on every path.

    Unpacks as ``stdin, stdout, finish``.
    """

    def __init__(self, args: Sequence[str], proc: "subprocess.Popen[bytes]") -> None:
        assert proc.stdin is not None
        assert proc.stdout is not None
        self.args = list(args)
        self.stdin: IO[bytes] = proc.stdin
        self.stdout: IO[bytes] = proc.stdout
        self.finish: Future[Completion] = Future()
        self._proc = proc
        self._summary: Optional[str] = None
        self._stderr_reader = _StderrReader(proc, self.finish)
        self._stderr_reader.start()

    def __iter__(self) -> Iterator[object]:
        return iter((self.stdin, self.stdout, self.finish))

    @property
    def pid(self) -> int:
        return self._proc.pid

    def wait(self) -> Completion:
        """Block until git has exited and stderr has been read."""
        return self.finish.result()

    def summary(self) -> str:
        """Return the summary of this invocation, waiting for git to exit."""
        if self._summary is None:
            self._summary = summary(self.args, self.wait())
        return self._summary

    def close(self) -> Completion:
        """Close stdin, drain and close stdout, and wait for git to exit."""
        if not self.stdin.closed:
            # git may already have exited without reading all of its input.
            with suppress(BrokenPipeError):
                self.stdin.close()
        if not self.stdout.closed:
            with self.stdout:
                self.stdout.read()
        return self.wait()

    def __enter__(self) -> "StreamingInvocation":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} pid={self._proc.pid} args={self.args!r}>"


def invoke_streams(git: Git, args: Sequence[str]) -> StreamingInvocation:
    """Start git and return its stdin and stdout to the caller.

    Args:
      git: The git executable to run
      args: Arguments to pass to git
    Returns: a StreamingInvocation; its stderr is already being drained
    """
    _check_invocation(git, args)
    logger.debug("execute (streaming): git %s", " ".join(args))
    proc = subprocess.Popen(
        [git.path, *args],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    return StreamingInvocation(args, proc)


def if_error(invocation: StreamingInvocation, fn: Callable[[str], T]) -> Optional[T]:
    """Call ``fn`` with the summary if the invocation failed.

    Blocks until git has exited.

    Returns: the value of ``fn``, or None if the invocation succeeded
    """
    if failed(invocation.wait()):
        return fn(invocation.summary())
    return None


def throw_if_error(invocation: StreamingInvocation) -> None:
    """Raise GitInvocationError if a streaming invocation failed."""
    completion = invocation.wait()
    if failed(completion):
        raise GitInvocationError(
            invocation.args, completion.exit, completion.err, invocation.summary()
        )

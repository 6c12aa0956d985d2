# commit.py -- Commit object codec
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

"""Commit object codec.

A commit object is a list of header lines followed by a blank line and the
message::

    tree <hex>
    parent <hex>
    author <name> <email> <time> <tz>
    committer <name> <email> <time> <tz>

    <message>

Headers are kept in file order. ``tree`` and ``parent`` values are parsed
into hashes; all other header values are kept verbatim.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from io import BytesIO
from typing import BinaryIO, Union

from .errors import ContractViolation, ObjectFormatException, TruncatedDataError
from .hash import Hash, parse_hex
from .log_utils import getLogger
from .process import Git, check_result, git_dir_args, invoke, invoke_checked
from .streams import EOF, NEWLINE, SPACE, read_until
from .transact import Transaction

logger = getLogger(__name__)

TREE_HEADER = "tree"
PARENT_HEADER = "parent"
AUTHOR_HEADER = "author"
COMMITTER_HEADER = "committer"

_HASH_HEADERS = frozenset([TREE_HEADER, PARENT_HEADER])


@dataclass(frozen=True)
class HashField:
    """A header whose value names another object."""

    key: str
    value: Hash


@dataclass(frozen=True)
class TextField:
    """A header whose value is kept as text."""

    key: str
    value: str


@dataclass(frozen=True)
class Message:
    """The commit message: everything after the blank line."""

    text: str


CommitEntry = Union[HashField, TextField, Message]


def _decode(data: bytes) -> str:
    return data.decode("utf-8", "surrogateescape")


def _encode(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


def read_commit(stream: BinaryIO) -> Iterator[CommitEntry]:
    """Read the entries of a commit object.

    Yields the headers in file order, then a single Message. The stream is
    consumed; it should not be used for anything else afterwards.

    Raises:
      TruncatedDataError: if the stream ends inside a header
      ObjectFormatException: if a header is malformed
    """
    while True:
        name, term = read_until(stream, (SPACE, NEWLINE))
        if term == NEWLINE and not name:
            text, _ = read_until(stream)
            yield Message(_decode(text))
            return
        if term == EOF:
            if not name:
                return
            raise TruncatedDataError("commit header", 1, partial=name)
        if term == NEWLINE:
            raise ObjectFormatException(f"commit header {name!r} has no value")

        key = _decode(name)
        if key in _HASH_HEADERS:
            value, missing, hash_term = parse_hex(stream)
            if hash_term == EOF:
                # The newline after the hash is missing too.
                raise TruncatedDataError(f"{key} hash", missing + 1, partial=value)
            if missing or hash_term != NEWLINE:
                raise ObjectFormatException(f"malformed {key} hash in commit")
            yield HashField(key, value)
        else:
            text, text_term = read_until(stream, (NEWLINE,))
            if text_term == EOF:
                raise TruncatedDataError(f"{key} header", 1, partial=_decode(text))
            yield TextField(key, _decode(text))


def write_commit_entry(out: BinaryIO, entry: CommitEntry) -> None:
    """Write a single entry as returned by :func:`read_commit`."""
    if isinstance(entry, Message):
        out.write(b"\n")
        out.write(_encode(entry.text))
        return
    if not isinstance(entry, (HashField, TextField)):
        raise ContractViolation(f"not a commit entry: {entry!r}")
    value = str(entry.value)
    if " " in entry.key or "\n" in entry.key or "\n" in value:
        raise ContractViolation(f"invalid commit header: {entry!r}")
    out.write(_encode(entry.key))
    out.write(b" ")
    out.write(_encode(value))
    out.write(b"\n")


def write_commit_entries(out: BinaryIO, entries: Iterable[CommitEntry]) -> None:
    for entry in entries:
        write_commit_entry(out, entry)


def serialize_commit(entries: Iterable[CommitEntry]) -> bytes:
    """Return the raw bytes of a commit object with the given entries."""
    f = BytesIO()
    write_commit_entries(f, entries)
    return f.getvalue()


def read_commit_object(
    git: Git, git_dir: str, commit_hash: Hash, trans: Transaction
) -> Iterator[CommitEntry]:
    """Read a commit from the repository.

    git is invoked at most once per commit and transaction; a failed lookup
    is remembered as well.

    Raises:
      GitInvocationError: if git cannot produce the commit
    """
    args = git_dir_args(git_dir, ["cat-file", "commit", str(commit_hash)])
    result = trans.get_or_compute(("commit", commit_hash), lambda: invoke(git, args))
    check_result(args, result)
    return read_commit(BytesIO(_encode(result.out)))


def write_commit(git: Git, git_dir: str, entries: Iterable[CommitEntry]) -> Hash:
    """Store a commit and return its hash."""
    args = git_dir_args(git_dir, ["hash-object", "-w", "--stdin", "-t", "commit"])
    result = invoke_checked(git, args, input=serialize_commit(entries))
    commit_hash = Hash.from_hex(result.out.strip())
    logger.debug("stored commit %s", commit_hash)
    return commit_hash

# tree.py -- Tree object codec
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

"""Tree object codec.

A tree object is a sequence of entries, each written as::

    <mode> SP <name> NUL <20-byte hash>

with no separator between entries. Modes are octal text as git writes them,
e.g. ``100644`` for a regular file and ``40000`` for a subtree.
"""

import dataclasses
import stat
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from io import BytesIO
from typing import BinaryIO, Optional

from .blob import write_blob
from .errors import ContractViolation, ObjectFormatException, TruncatedDataError
from .hash import HASH_LENGTH, Hash, read_binary_hash
from .log_utils import getLogger
from .process import (
    Git,
    git_dir_args,
    invoke_checked,
    invoke_streams,
    throw_if_error,
)
from .streams import EOF, NUL, read_until
from .transact import Transaction

logger = getLogger(__name__)

EMPTY_TREE = Hash.from_hex("4b825dc642cb6eb9a060e54bf8d69288fbee4904")

MODE_TREE = "40000"
MODE_BLOB = "100644"
MODE_EXECUTABLE = "100755"
MODE_SYMLINK = "120000"


def _decode(data: bytes) -> str:
    return data.decode("utf-8", "surrogateescape")


def _encode(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


@dataclass(frozen=True)
class TreeEntry:
    """An entry of a tree object.

    Entries read from git carry ``mode``, ``name`` and ``hash``; a recursive
    read also fills ``children`` for subtrees. Entries passed to
    :func:`write_tree` may leave ``hash`` unset and carry either the blob
    ``content`` or the subtree ``children`` to store instead.
    """

    mode: str
    name: str
    hash: Optional[Hash] = None
    children: Optional[tuple["TreeEntry", ...]] = None
    content: Optional[bytes] = None

    def __post_init__(self) -> None:
        if self.children is not None and not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))


def is_tree_mode(mode: str) -> bool:
    """Check whether a tree entry mode denotes a subtree."""
    try:
        return stat.S_ISDIR(int(mode, 8))
    except ValueError:
        return False


def read_tree_entry(stream: BinaryIO) -> Optional[TreeEntry]:
    """Read one entry of a tree object.

    Returns: the entry, or None if the stream was already at its end
    Raises:
      TruncatedDataError: if the stream ends inside the entry
      ObjectFormatException: if the mode and name are not separated by a space
    """
    mode_and_name, term = read_until(stream, (NUL,))
    if term == EOF:
        if not mode_and_name:
            return None
        raise TruncatedDataError(
            "tree entry", HASH_LENGTH + 1, partial=mode_and_name
        )
    mode, sep, name = mode_and_name.partition(b" ")
    if not sep:
        raise ObjectFormatException(f"tree entry has no name: {mode_and_name!r}")
    entry_hash, missing = read_binary_hash(stream)
    if missing:
        raise TruncatedDataError("tree entry hash", missing, partial=entry_hash)
    return TreeEntry(_decode(mode), _decode(name), entry_hash)


def iter_tree_entries(stream: BinaryIO) -> Iterator[TreeEntry]:
    """Iterate over the entries of a tree object.

    The stream is consumed; it should not be used for anything else
    afterwards.
    """
    while True:
        entry = read_tree_entry(stream)
        if entry is None:
            return
        yield entry


def write_tree_entry(out: BinaryIO, entry: TreeEntry) -> None:
    """Write one entry of a tree object."""
    if entry.hash is None:
        raise ContractViolation(f"tree entry {entry.name!r} has no hash")
    out.write(_encode(entry.mode))
    out.write(b" ")
    out.write(_encode(entry.name))
    out.write(b"\x00")
    out.write(entry.hash.raw)


def write_tree_entries(out: BinaryIO, entries: Iterable[TreeEntry]) -> None:
    for entry in entries:
        write_tree_entry(out, entry)


def serialize_tree(entries: Iterable[TreeEntry]) -> bytes:
    """Return the raw bytes of a tree object with the given entries."""
    f = BytesIO()
    write_tree_entries(f, entries)
    return f.getvalue()


def _read_tree_uncached(
    git: Git, git_dir: str, tree_hash: Hash, trans: Transaction
) -> tuple[TreeEntry, ...]:
    args = git_dir_args(git_dir, ["cat-file", "tree", str(tree_hash)])
    with invoke_streams(git, args) as inv:
        inv.stdin.close()
        data = inv.stdout.read()
    # A failed git may have printed a partial tree.
    throw_if_error(inv)
    entries = list(iter_tree_entries(BytesIO(data)))
    return tuple(
        dataclasses.replace(
            entry, children=tuple(read_tree(git, git_dir, entry.hash, trans))
        )
        if is_tree_mode(entry.mode)
        else entry
        for entry in entries
    )


def read_tree(
    git: Git, git_dir: str, tree_hash: Hash, trans: Transaction
) -> list[TreeEntry]:
    """Read a tree and, recursively, all of its subtrees.

    Each tree is fetched from git at most once per transaction, however many
    times it is referenced. Blob entries are not fetched.

    Args:
      git: The git executable to run
      git_dir: Path of the repository
      tree_hash: Hash of the tree to read
      trans: Transaction shared by the whole read
    Returns: the entries of the tree; subtree entries carry their children
    Raises:
      GitInvocationError: if git cannot produce one of the trees
    """
    return list(
        trans.get_or_compute(
            ("tree", tree_hash),
            lambda: _read_tree_uncached(git, git_dir, tree_hash, trans),
        )
    )


def _resolve_entry(git: Git, git_dir: str, entry: TreeEntry) -> TreeEntry:
    if entry.children is not None:
        subtree_hash = write_tree(git, git_dir, entry.children)
        return TreeEntry(entry.mode, entry.name, subtree_hash)
    if entry.content is not None:
        blob_hash = write_blob(git, git_dir, entry.content)
        return TreeEntry(entry.mode, entry.name, blob_hash)
    if entry.hash is None:
        raise ContractViolation(
            f"tree entry {entry.name!r} needs a hash, children or content"
        )
    return TreeEntry(entry.mode, entry.name, entry.hash)


def write_tree(git: Git, git_dir: str, entries: Iterable[TreeEntry]) -> Hash:
    """Store a tree, writing its blobs and subtrees first.

    Entries are stored in the order given.

    Returns: the hash of the new tree; EMPTY_TREE for no entries
    """
    resolved = [_resolve_entry(git, git_dir, entry) for entry in entries]
    args = git_dir_args(
        git_dir, ["hash-object", "-w", "--stdin", "-t", "tree", "--literally"]
    )
    result = invoke_checked(git, args, input=serialize_tree(resolved))
    tree_hash = Hash.from_hex(result.out.strip())
    logger.debug("stored tree %s with %d entries", tree_hash, len(resolved))
    return tree_hash

# transact.py -- Per-operation object cache
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

"""Per-operation object cache.

A :class:`Transaction` remembers objects resolved during one logical
operation, such as a recursive tree read, so that an object referenced more
than once is fetched from git only once. It is created for the operation,
passed explicitly to every call that should share it, and thrown away when
the operation ends. There is no eviction and no sharing between concurrent
operations.
"""

from collections.abc import Callable, Hashable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

T = TypeVar("T")


class Transaction:
    """Cache of values computed during one operation."""

    def __init__(self) -> None:
        self._values: dict[Hashable, Any] = {}

    def get_or_compute(self, key: Hashable, compute: Callable[[], T]) -> T:
        """Return the value cached for ``key``, computing it on first use.

        If ``compute`` raises, nothing is cached and the exception propagates.
        """
        try:
            return self._values[key]
        except KeyError:
            pass
        value = compute()
        self._values[key] = value
        return value

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def clear(self) -> None:
        self._values.clear()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} with {len(self._values)} object(s)>"


@contextmanager
def transact() -> Iterator[Transaction]:
    """Run an operation with a fresh transaction.

    Example::

        with transact() as trans:
            entries = read_tree(default_git, git_dir, tree_hash, trans)
    """
    trans = Transaction()
    try:
        yield trans
    finally:
        trans.clear()

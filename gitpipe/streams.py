# streams.py -- Low-level readers for git object streams
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

"""Low-level readers for git object streams.

These helpers never raise on premature end of input. Each reports how far it
got, and the caller decides whether the shortfall is an error.
"""

from collections.abc import Container
from typing import BinaryIO, Optional

EOF = -1

NUL = 0
SPACE = ord(" ")
NEWLINE = ord("\n")


def read_byte(stream: BinaryIO) -> int:
    """Read one byte.

    Returns: the byte value, or EOF at end of input
    """
    b = stream.read(1)
    if not b:
        return EOF
    return b[0]


def read_until(
    stream: BinaryIO, stop: Optional[Container[int]] = None
) -> tuple[bytes, int]:
    """Read bytes up to the first one contained in ``stop``.

    The terminating byte is consumed but not returned as part of the data.
    Without a stop set the rest of the stream is read.

    Args:
      stream: Binary stream to read from
      stop: Byte values that end the read
    Returns: tuple of (collected bytes, terminator); the terminator is EOF
      when the input ended before a stop byte was seen
    """
    if not stop:
        return stream.read(), EOF
    collected = bytearray()
    while True:
        c = read_byte(stream)
        if c == EOF or c in stop:
            return bytes(collected), c
        collected.append(c)


def read_exact(stream: BinaryIO, n: int) -> tuple[bytes, int]:
    """Read exactly ``n`` bytes, or as many as remain.

    Pipes may return fewer bytes than requested; this keeps reading until
    ``n`` bytes have arrived or the input ends.

    Returns: tuple of (data, number of bytes missing)
    """
    chunks = []
    remaining = n
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks), remaining

# hash.py -- Object hashes and their text and binary forms
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

"""Object hashes and their text and binary forms.

A git object is named by the SHA-1 of its contents: 20 bytes, written as 40
lowercase hex characters in text contexts such as commit headers and command
output, and as raw bytes inside tree objects.

Only lowercase hex is accepted. Git always emits the lowercase form, and
treating ``A``-``F`` as non-hex keeps a single canonical spelling for every
hash.
"""

import functools
from typing import BinaryIO, Optional, Union

from .errors import ContractViolation, ObjectFormatException
from .streams import EOF, read_byte, read_exact

HASH_LENGTH = 20
HEX_LENGTH = 40


def hex_char_val(c: Union[int, str]) -> Optional[int]:
    """Return the value of a lowercase hex digit.

    Args:
      c: A byte value or a one-character string
    Returns: 0-15, or None for anything that is not 0-9 or a-f
    """
    if isinstance(c, str):
        if len(c) != 1:
            return None
        c = ord(c)
    if ord("0") <= c <= ord("9"):
        return c - ord("0")
    if ord("a") <= c <= ord("f"):
        return c - ord("a") + 10
    return None


def is_full_hash(s: Union[str, bytes]) -> bool:
    """Check whether ``s`` looks like a full hash.

    The object does not have to exist in any repository.
    """
    return len(s) == HEX_LENGTH and all(hex_char_val(c) is not None for c in s)


@functools.total_ordering
class Hash:
    """A 20-byte object name."""

    __slots__ = ("_raw",)

    def __init__(self, raw: bytes) -> None:
        """Create a hash from its binary form.

        Args:
          raw: Exactly 20 bytes; the buffer is copied
        """
        if not isinstance(raw, (bytes, bytearray, memoryview)):
            raise ContractViolation(f"hash must be built from bytes, not {raw!r}")
        raw = bytes(raw)
        if len(raw) != HASH_LENGTH:
            raise ContractViolation(
                f"hash must be {HASH_LENGTH} bytes, got {len(raw)}"
            )
        self._raw = raw

    @classmethod
    def from_hex(cls, text: Union[str, bytes]) -> "Hash":
        """Parse a full 40-character lowercase hex hash."""
        if not is_full_hash(text):
            raise ObjectFormatException(f"not a full hash: {text!r}")
        if isinstance(text, bytes):
            text = text.decode("ascii")
        return cls(bytes.fromhex(text))

    @property
    def raw(self) -> bytes:
        """The 20 bytes of this hash."""
        return self._raw

    def hex(self) -> str:
        return self._raw.hex()

    def __bytes__(self) -> bytes:
        return self._raw

    def __str__(self) -> str:
        return self._raw.hex()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._raw.hex()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Hash):
            return NotImplemented
        return self._raw == other._raw

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Hash):
            return NotImplemented
        return self._raw < other._raw

    def __hash__(self) -> int:
        # The bytes are already a digest; the first four are enough.
        return int.from_bytes(self._raw[:4], "big")


def parse_hex(stream: BinaryIO) -> tuple[Hash, int, int]:
    """Read a hash in hex form from a binary stream.

    Digits are consumed two at a time. Parsing stops at the first byte that is
    not a lowercase hex digit; after 40 digits exactly one more byte is read.

    Returns: tuple of (hash, digits missing, terminator). The hash holds the
      bytes parsed so far, zero-filled; a lone trailing digit fills the high
      nibble of its byte. The terminator is the byte that stopped parsing, or
      EOF.
    """
    raw = bytearray(HASH_LENGTH)
    for i in range(HASH_LENGTH):
        c1 = read_byte(stream)
        v1 = hex_char_val(c1)
        if v1 is None:
            return Hash(raw), HEX_LENGTH - 2 * i, c1
        c2 = read_byte(stream)
        v2 = hex_char_val(c2)
        if v2 is None:
            raw[i] = v1 << 4
            return Hash(raw), HEX_LENGTH - 1 - 2 * i, c2
        raw[i] = (v1 << 4) | v2
    return Hash(raw), 0, read_byte(stream)


def read_binary_hash(stream: BinaryIO) -> tuple[Hash, int]:
    """Read a hash in binary form, without reading past it.

    Returns: tuple of (hash, bytes missing); a short read is zero-filled
    """
    data, missing = read_exact(stream, HASH_LENGTH)
    return Hash(data.ljust(HASH_LENGTH, b"\x00")), missing


def write_binary_hash(hex_text: Union[str, bytes], out: BinaryIO) -> None:
    """Write the binary form of the leading hex pairs of ``hex_text``.

    Writing stops at the first pair containing a non-hex character; an
    unpaired trailing digit is ignored.
    """
    data = bytearray()
    for i in range(0, len(hex_text) - 1, 2):
        hi = hex_char_val(hex_text[i])
        lo = hex_char_val(hex_text[i + 1])
        if hi is None or lo is None:
            break
        data.append((hi << 4) | lo)
    out.write(bytes(data))

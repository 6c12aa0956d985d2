# test_streams.py -- Tests for gitpipe.streams
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

"""Tests for gitpipe.streams."""

from io import BytesIO

from gitpipe.streams import EOF, NEWLINE, NUL, SPACE, read_byte, read_exact, read_until

from . import TestCase


class TrickleReader:
    """Binary reader that returns at most one byte per read, like a slow pipe."""

    def __init__(self, data: bytes) -> None:
        self._stream = BytesIO(data)

    def read(self, n: int = -1) -> bytes:
        if n == 0:
            return b""
        return self._stream.read(1)


class ReadByteTests(TestCase):
    def test_read(self) -> None:
        stream = BytesIO(b"ab")
        self.assertEqual(ord("a"), read_byte(stream))
        self.assertEqual(ord("b"), read_byte(stream))
        self.assertEqual(EOF, read_byte(stream))


class ReadUntilTests(TestCase):
    def test_stops_at_terminator(self) -> None:
        stream = BytesIO(b"100644 name\x00rest")
        self.assertEqual((b"100644 name", NUL), read_until(stream, (NUL,)))
        self.assertEqual(b"rest", stream.read())

    def test_first_of_several(self) -> None:
        stream = BytesIO(b"tree abc\n")
        self.assertEqual((b"tree", SPACE), read_until(stream, (SPACE, NEWLINE)))
        self.assertEqual((b"abc", NEWLINE), read_until(stream, (SPACE, NEWLINE)))

    def test_eof(self) -> None:
        self.assertEqual((b"partial", EOF), read_until(BytesIO(b"partial"), (NUL,)))
        self.assertEqual((b"", EOF), read_until(BytesIO(b""), (NUL,)))

    def test_empty_value(self) -> None:
        self.assertEqual((b"", NEWLINE), read_until(BytesIO(b"\nx"), (NEWLINE,)))

    def test_no_stop_reads_everything(self) -> None:
        stream = BytesIO(b"heading\n\ndetails\x00")
        self.assertEqual((b"heading\n\ndetails\x00", EOF), read_until(stream))

    def test_empty_stop_reads_everything(self) -> None:
        self.assertEqual((b"a b", EOF), read_until(BytesIO(b"a b"), ()))


class ReadExactTests(TestCase):
    def test_exact(self) -> None:
        stream = BytesIO(b"abcdef")
        self.assertEqual((b"abcd", 0), read_exact(stream, 4))
        self.assertEqual(b"ef", stream.read())

    def test_short(self) -> None:
        self.assertEqual((b"abc", 2), read_exact(BytesIO(b"abc"), 5))
        self.assertEqual((b"", 5), read_exact(BytesIO(b""), 5))

    def test_short_reads_are_retried(self) -> None:
        self.assertEqual((b"abcde", 0), read_exact(TrickleReader(b"abcdefg"), 5))

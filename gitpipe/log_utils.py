# log_utils.py -- Logging utilities for gitpipe
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

"""Logging utilities for gitpipe.

gitpipe is used as a library, so by default nothing is printed: a no-op
handler is attached to the ``gitpipe`` logger at import time to keep the
logging module from complaining about missing handlers. Applications that
want to see what gitpipe does call :func:`default_logging_config`, or set up
logging themselves after calling :func:`remove_null_handler`.

Modules only need ``getLogger``, which is re-exported here.
"""

import logging
import os
import sys
from typing import Optional

getLogger = logging.getLogger

TRACE_ENVIRONMENT_VARIABLE = "GITPIPE_TRACE"


class _NullHandler(logging.Handler):
    """No-op logging handler to avoid unexpected logging warnings."""

    def emit(self, record: logging.LogRecord) -> None:
        pass


_NULL_HANDLER = _NullHandler()
_GITPIPE_LOGGER = getLogger("gitpipe")
_GITPIPE_LOGGER.addHandler(_NULL_HANDLER)


def _get_trace_target() -> Optional[str]:
    """Get the trace target from the GITPIPE_TRACE environment variable.

    Returns:
        - None if tracing is disabled
        - "-" for stderr output (values "1", "2", "true")
        - an absolute file or directory path
    """
    trace_value = os.environ.get(TRACE_ENVIRONMENT_VARIABLE, "")
    if not trace_value or trace_value.lower() in ("0", "false"):
        return None
    if trace_value.lower() in ("1", "2", "true"):
        return "-"
    if os.path.isabs(trace_value):
        return trace_value
    return None


def _configure_logging_from_trace() -> bool:
    """Configure DEBUG logging according to GITPIPE_TRACE.

    Returns True if tracing was configured, False otherwise.
    """
    trace_target = _get_trace_target()
    if trace_target is None:
        return False

    trace_format = "%(asctime)s %(name)s %(levelname)s: %(message)s"

    if trace_target == "-":
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format=trace_format)
        return True

    if os.path.isdir(trace_target):
        filename = os.path.join(trace_target, f"trace.{os.getpid()}")
    else:
        filename = trace_target
    try:
        logging.basicConfig(
            level=logging.DEBUG, filename=filename, filemode="a", format=trace_format
        )
    except OSError as e:
        sys.stderr.write(
            f"Warning: Failed to open trace file {filename}: {e}\n"
        )
        return False
    return True


def default_logging_config() -> None:
    """Set up the default gitpipe loggers.

    With GITPIPE_TRACE set to "1", "2" or "true", every git invocation is
    traced to stderr; with an absolute path it is appended to that file (or
    to a per-process file inside it, for a directory). Otherwise INFO and
    above go to stderr.
    """
    remove_null_handler()

    if not _configure_logging_from_trace():
        logging.basicConfig(
            level=logging.INFO,
            stream=sys.stderr,
            format="%(asctime)s %(levelname)s: %(message)s",
        )


def remove_null_handler() -> None:
    """Remove the null handler from the gitpipe logger."""
    _GITPIPE_LOGGER.removeHandler(_NULL_HANDLER)

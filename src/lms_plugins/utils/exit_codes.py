"""Exit-code contract for the ``lms-plugins`` command.

Code  Meaning
----  -------
  0   Success
  1   Violation: the checked data is invalid (e.g. feedback boundaries rejected)
  2   Error: usage error, missing file, runtime failure
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    VIOLATION = 1
    ERROR = 2

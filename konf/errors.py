# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
from typing import Iterable
from typing import Optional
from typing import Tuple


class KconfigError(Exception):
    """
    Base class for all errors raised by konf.
    """

    pass


class KconfigParseError(KconfigError):
    """
    Exception raised when parsing of the Kconfig input fails.
    The whole parse is aborted, no partial document is ever returned.

    offset is a 0-based character offset into the parsed text, lineno and col are 1-based.
    """

    def __init__(
        self,
        msg: str,
        offset: int,
        lineno: int,
        col: int,
        line: str = "",
        filename: Optional[str] = None,
    ) -> None:
        self.msg = msg
        self.offset = offset
        self.lineno = lineno
        self.col = col
        self.line = line
        self.filename = filename
        super().__init__(str(self))

    @property
    def location(self) -> str:
        return f"{self.filename or '<string>'}:{self.lineno}:{self.col}"

    def explain(self) -> str:
        """
        Multi-line description with the offending line and a marker under the failing column.
        """
        lines = [str(self)]
        if self.line:
            lines.append(self.line)
            lines.append(" " * (self.col - 1) + "^")
        return "\n".join(lines)

    def __str__(self) -> str:
        return f"{self.location}: {self.msg}"


class KconfigSyntaxError(KconfigParseError):
    """
    The input does not match the grammar. expected holds names of the rules
    which were attempted at the furthest position reached by the parser.
    """

    def __init__(
        self,
        msg: str,
        offset: int,
        lineno: int,
        col: int,
        line: str = "",
        filename: Optional[str] = None,
        expected: Iterable[str] = (),
    ) -> None:
        self.expected: Tuple[str, ...] = tuple(sorted(set(expected)))
        super().__init__(msg, offset, lineno, col, line, filename)


class StringDecodeError(KconfigParseError):
    """
    Quoted string is unterminated or contains an invalid or incomplete escape sequence.
    escape holds the offending escape text (empty for an unterminated string).
    """

    def __init__(
        self,
        msg: str,
        offset: int,
        lineno: int,
        col: int,
        line: str = "",
        filename: Optional[str] = None,
        escape: str = "",
    ) -> None:
        self.escape = escape
        super().__init__(msg, offset, lineno, col, line, filename)

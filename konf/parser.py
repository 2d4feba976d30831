# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
import re
from typing import Optional
from typing import Set

from pyparsing import ParseException
from pyparsing import ParseFatalException
from pyparsing import ParseResults
from pyparsing import col
from pyparsing import line as pyparsing_line
from pyparsing import lineno

from .ast import Config
from .ast import Document
from .ast import MainMenu
from .ast import TypeDecl
from .ast import TypeKind
from .errors import KconfigSyntaxError
from .errors import StringDecodeError
from .grammar import EscapeError
from .grammar import KonfGrammar
from .grammar import StringDecodeException
from .grammar import scan_string

_FOUND_TOKEN = re.compile(r"[^ \t\r\n]{1,20}")


class Parser:
    """
    The Parser class is responsible for parsing Kconfig text and building the Document.

    pyparsing recognizes the input according to KonfGrammar and calls the parse actions below
    (semantic actions behaving like callbacks), which turn matched tokens into AST nodes.
    Because pyparsing parses "bottom-up", fields are built before the config which owns them.

    Parsing state (furthest failure) lives in the instance; one Parser must not be used from
    several threads at once, but independent Parser instances share nothing.
    """

    def __init__(self, filename: Optional[str] = None) -> None:
        self.filename = filename
        self.furthest_loc = -1
        self.expected: Set[str] = set()
        self.grammar = KonfGrammar(self)

    def parse_string(self, text: str) -> Document:
        self.furthest_loc = -1
        self.expected = set()
        try:
            results = self.grammar(text)
        except StringDecodeException as e:
            raise StringDecodeError(
                e.msg,
                offset=e.loc,
                lineno=lineno(e.loc, text),
                col=col(e.loc, text),
                line=pyparsing_line(e.loc, text),
                filename=self.filename,
                escape=e.escape,
            ) from None
        except ParseException as e:
            raise self.syntax_error(text, e) from None
        return Document(items=tuple(results))

    ############################
    # Failure tracking
    ############################
    def record_failure(self, s: str, loc: int, expr, err: Exception) -> None:
        """
        Fail action attached to the terminals of the grammar. Keeps names of the terminals
        which failed at the furthest location; that is where the input most likely went wrong.
        """
        if isinstance(err, ParseFatalException):
            return
        # pyparsing may raise past the start of the token, the failing position is what counts
        loc = max(loc, getattr(err, "loc", loc))
        if loc > self.furthest_loc:
            self.furthest_loc = loc
            self.expected = set()
        if loc == self.furthest_loc:
            self.expected.add(str(expr))

    def syntax_error(self, text: str, exception: ParseException) -> KconfigSyntaxError:
        # Every terminal records its failures, so the tracker is always at least as far as the exception.
        loc = self.furthest_loc
        expected = set(self.expected)
        if exception.loc > loc:
            loc = exception.loc
            expected = {str(exception.parser_element)} if exception.parser_element is not None else set()

        found = _FOUND_TOKEN.match(text, loc)
        msg = "Expected {}, found {}".format(
            " or ".join(sorted(expected)) or "valid input",
            repr(found.group()) if found else "end of input",
        )
        return KconfigSyntaxError(
            msg,
            offset=loc,
            lineno=lineno(loc, text),
            col=col(loc, text),
            line=pyparsing_line(loc, text),
            filename=self.filename,
            expected=expected,
        )

    ############################
    # Parse Actions
    ############################
    def parse_typename(self, s: str, loc: int, parsed_typename: ParseResults) -> TypeKind:
        return TypeKind(parsed_typename[0])

    def parse_typedecl(self, s: str, loc: int, parsed_typedecl: ParseResults) -> TypeDecl:
        return TypeDecl(kind=parsed_typedecl[0], description=parsed_typedecl[1])

    def parse_config(self, s: str, loc: int, parsed_config: ParseResults) -> Config:
        _, name, *fields = parsed_config
        return Config(name=name, fields=tuple(fields))

    def parse_mainmenu(self, s: str, loc: int, parsed_mainmenu: ParseResults) -> MainMenu:
        return MainMenu(title=parsed_mainmenu[1])


def parse(text: str, filename: Optional[str] = None) -> Document:
    """
    Parse Kconfig text into a Document. Raises KconfigSyntaxError or StringDecodeError.
    """
    return Parser(filename).parse_string(text)


def parse_file(path: str, encoding: str = "utf-8") -> Document:
    with open(path, "r", encoding=encoding, newline="") as f:
        text = f.read()
    return parse(text, filename=path)


def decode_string(raw: str) -> str:
    """
    Decode the contents of a quoted string (text between the quotes, without them).
    Offsets in raised StringDecodeError are relative to raw.
    """
    try:
        end, decoded = scan_string(raw + '"', 0)
        if end != len(raw) + 1:
            raise EscapeError(end - 1, 'unescaped " inside string', '"')
    except EscapeError as e:
        if e.loc < 0:
            # trailing backslash escaped the closing quote appended above
            e = EscapeError(len(raw) - 1, "incomplete escape sequence at the end of input", "\\")
        raise StringDecodeError(
            e.msg,
            offset=e.loc,
            lineno=lineno(e.loc, raw),
            col=col(e.loc, raw),
            line=pyparsing_line(e.loc, raw),
            escape=e.escape,
        ) from None
    return decoded

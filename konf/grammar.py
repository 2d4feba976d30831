# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
import re
import string
from typing import TYPE_CHECKING
from typing import List
from typing import Tuple

from pyparsing import MatchFirst
from pyparsing import OneOrMore
from pyparsing import Opt
from pyparsing import ParseException
from pyparsing import ParseFatalException
from pyparsing import ParseResults
from pyparsing import Regex
from pyparsing import StringEnd
from pyparsing import Token
from pyparsing import Word
from pyparsing import ZeroOrMore
from pyparsing import alphas

from .ast import TypeKind

if TYPE_CHECKING:
    from konf.parser import Parser

# Only these four characters separate tokens, other Unicode whitespace is significant.
WHITESPACE_CHARS = " \t\r\n"

SIMPLE_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

# A keyword must not be followed by an identifier character, "boolean" is not "bool" + "ean".
# The character before a keyword is not checked: "config FOObool" is name "FOO" and type "bool".
KEYWORD_END = r"(?![A-Za-z0-9_])"

UNICODE_ESCAPE_DIGITS = 4
SURROGATES = range(0xD800, 0xE000)


class EscapeError(ValueError):
    """
    Raised by scan_string() for malformed string contents.
    loc points to the offending escape (or to the opening quote of an unterminated string).
    """

    def __init__(self, loc: int, msg: str, escape: str = "") -> None:
        super().__init__(msg)
        self.loc = loc
        self.msg = msg
        self.escape = escape


def scan_string(text: str, loc: int) -> Tuple[int, str]:
    """
    Decode the body of a quoted string. loc points just after the opening quote.
    Returns the location right after the closing quote and the decoded string.
    """
    start = loc - 1
    chunks: List[str] = []
    end = len(text)
    while loc < end:
        char = text[loc]
        if char == '"':
            return loc + 1, "".join(chunks)
        if char != "\\":
            # copy the whole run of plain characters at once
            run_end = loc + 1
            while run_end < end and text[run_end] not in '"\\':
                run_end += 1
            chunks.append(text[loc:run_end])
            loc = run_end
            continue

        if loc + 1 >= end:
            raise EscapeError(loc, "incomplete escape sequence at the end of input", "\\")
        kind = text[loc + 1]
        if kind in SIMPLE_ESCAPES:
            chunks.append(SIMPLE_ESCAPES[kind])
            loc += 2
        elif kind == "u":
            digits = text[loc + 2 : loc + 2 + UNICODE_ESCAPE_DIGITS]
            hex_len = 0
            for digit in digits:
                if digit not in string.hexdigits:
                    break
                hex_len += 1
            escape = text[loc : loc + 2 + hex_len]
            if hex_len < UNICODE_ESCAPE_DIGITS:
                raise EscapeError(loc, f"\\u must be followed by {UNICODE_ESCAPE_DIGITS} hexadecimal digits", escape)
            code_point = int(digits, 16)
            if code_point in SURROGATES:
                raise EscapeError(loc, f"{escape} is a UTF-16 surrogate, not a character", escape)
            chunks.append(chr(code_point))
            loc += 2 + UNICODE_ESCAPE_DIGITS
        else:
            raise EscapeError(loc, f"invalid escape sequence \\{kind}", "\\" + kind)

    raise EscapeError(start, "unterminated string", "")


class StringDecodeException(ParseFatalException):
    """
    Fatal pyparsing exception: a malformed string cannot be fixed by trying another alternative,
    so the whole parse stops here.
    """

    escape = ""


class DecodedString(Token):
    """
    ParserElement for double-quoted strings. Escapes are decoded directly while scanning,
    pyparsing's QuotedString would leave validation of escape sequences to a parse action.
    """

    def __init__(self):
        super().__init__()

    def _generateDefaultName(self) -> str:
        return "string"

    def parseImpl(self, instring: str, loc: int, doActions: bool = True) -> Tuple[int, List[str]]:
        if loc >= len(instring) or instring[loc] != '"':
            raise ParseException(instring, loc, "Expected string", self)
        try:
            loc, decoded = scan_string(instring, loc + 1)
        except EscapeError as e:
            exception = StringDecodeException(instring, e.loc, e.msg, self)
            exception.escape = e.escape
            raise exception
        return loc, [decoded]


class KonfGrammar:
    """
    Grammar of the Kconfig dialect:

        kconfig  = (mainmenu | config)+
        mainmenu = "mainmenu" string
        config   = "config" name field*
        field    = typedecl
        typedecl = typename string
        typename = "bool" | "def_bool" | "def_tristate" | "int" | "hex" | "string" | "tristate"
        name     = ("A".."Z" | "_")*

    Whitespace and "#" comments may appear between any two tokens.
    Parse actions are defined in the Parser class, the grammar only wires them.
    A new grammar is built for every Parser, so parsers never share pyparsing elements.
    """

    def __init__(self, parser: "Parser") -> None:
        self.init_grammar(parser)

    def init_grammar(self, parser: "Parser") -> None:
        self.parser = parser

        def terminal(element):
            return element.set_whitespace_chars(WHITESPACE_CHARS).set_fail_action(parser.record_failure)

        quoted_string = terminal(DecodedString())

        def keyword(text: str):
            return Regex(re.escape(text) + KEYWORD_END).set_name(text)

        # Alternatives are tried in the order of TypeKind declaration, first match wins.
        typename = terminal(MatchFirst([keyword(kind.value) for kind in TypeKind]).set_name("type name"))
        typename.set_parse_action(parser.parse_typename)

        typedecl = (typename + quoted_string).set_parse_action(parser.parse_typedecl)
        field = typedecl

        # Name may be empty, semantic layer decides what to do with such config.
        name = Opt(terminal(Word(alphas.upper() + "_").set_name("name")), default="")

        config = terminal(keyword("config")) + name + ZeroOrMore(field)
        config = config.set_parse_action(parser.parse_config)

        mainmenu = terminal(keyword("mainmenu")) + quoted_string
        mainmenu = mainmenu.set_parse_action(parser.parse_mainmenu)

        comment = Regex(r"#[^\r\n]*").set_whitespace_chars(WHITESPACE_CHARS)

        end_of_input = terminal(StringEnd().set_name("end of input"))

        self.root = (OneOrMore(mainmenu | config) + end_of_input).set_whitespace_chars(WHITESPACE_CHARS)
        self.root.ignore(comment)
        # Offsets reported in errors must point into the original text, pyparsing expands tabs otherwise.
        self.root.parse_with_tabs()

    def __call__(self, text: str) -> ParseResults:
        return self.root.parse_string(text)

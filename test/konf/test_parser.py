# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
import threading

import pytest

from konf import Config
from konf import Document
from konf import KconfigParseError
from konf import KconfigSyntaxError
from konf import MainMenu
from konf import Parser
from konf import StringDecodeError
from konf import TypeDecl
from konf import TypeKind
from konf import parse
from konf import parse_file
from konf.ast import DEFAULT_TITLE


class TestTopLevelItems:
    def test_mainmenu(self):
        assert parse('mainmenu "Hello"') == Document(items=(MainMenu("Hello"),))

    def test_config_with_bool(self):
        document = parse('config FOO\n\tbool "Enable Foo"')
        assert document.items == (Config(name="FOO", fields=(TypeDecl(TypeKind.BOOL, "Enable Foo"),)),)

    def test_fields_keep_order(self):
        document = parse('config FOO\n\tdef_bool "x"\n\thex "y"')
        (config,) = document.items
        assert config.fields == (TypeDecl(TypeKind.DEF_BOOL, "x"), TypeDecl(TypeKind.HEX, "y"))

    def test_config_without_fields(self):
        assert parse("config FOO").items == (Config(name="FOO"),)

    def test_items_keep_order(self):
        document = parse('config B\nmainmenu "menu"\nconfig A\n\tint "a"\nmainmenu "other"\n')
        assert [type(item) for item in document.items] == [Config, MainMenu, Config, MainMenu]
        assert [config.name for config in document.configs] == ["B", "A"]
        assert document.title == "other"

    def test_duplicate_names_are_kept(self):
        document = parse('config FOO\n\tbool "first"\nconfig FOO\n\tint "second"\n')
        assert len(document) == 2
        assert [config.fields[0].description for config in document.find("FOO")] == ["first", "second"]

    def test_default_title(self):
        assert parse("config FOO").title == DEFAULT_TITLE

    def test_empty_name(self):
        document = parse('config \n\tbool "d"')
        assert document.items == (Config(name="", fields=(TypeDecl(TypeKind.BOOL, "d"),)),)

    def test_name_with_underscores(self):
        assert parse("config _FOO_BAR_").items[0].name == "_FOO_BAR_"

    def test_single_line(self):
        document = parse('config FOO bool "a" string "b" mainmenu "m"')
        assert document.items == (
            Config("FOO", (TypeDecl(TypeKind.BOOL, "a"), TypeDecl(TypeKind.STRING, "b"))),
            MainMenu("m"),
        )

    def test_config_type(self):
        document = parse('config FOO\n\ttristate "t"\n\tint "i"\nconfig BAR')
        assert document.find("FOO")[0].type == TypeKind.TRISTATE
        assert document.find("BAR")[0].type is None


class TestTypeNames:
    @pytest.mark.parametrize("kind", list(TypeKind))
    def test_all_type_names(self, kind):
        document = parse(f'config FOO\n\t{kind.value} "description"')
        assert document.items[0].fields == (TypeDecl(kind, "description"),)

    @pytest.mark.parametrize("keyword", ["boolean", "def_boolx", "ints", "stringy", "Bool", "def"])
    def test_no_prefix_match(self, keyword):
        with pytest.raises(KconfigSyntaxError) as err:
            parse(f'config FOO\n\t{keyword} "description"')
        assert err.value.offset == len("config FOO\n\t")
        assert "type name" in err.value.expected

    @pytest.mark.parametrize("text, name", [('config FOObool "x"', "FOO"), ('config FOO_bool "x"', "FOO_")])
    def test_type_directly_after_name(self, text, name):
        assert parse(text).items == (Config(name, (TypeDecl(TypeKind.BOOL, "x"),)),)

    def test_keyword_needs_separator(self):
        with pytest.raises(KconfigSyntaxError) as err:
            parse('configFOO bool "x"')
        assert err.value.offset == 0
        assert err.value.expected == ("config", "mainmenu")


class TestWhitespaceAndComments:
    def test_comment_is_transparent(self):
        with_comment = parse('config FOO # trailing note\n\tbool "b"')
        without_comment = parse('config FOO\n\tbool "b"')
        assert with_comment == without_comment

    def test_comments_everywhere(self):
        text = '# leading\nmainmenu # before title\n "T" # after\r\nconfig FOO #\n\tbool # x\n "b"\n# trailing'
        assert parse(text).items == (MainMenu("T"), Config("FOO", (TypeDecl(TypeKind.BOOL, "b"),)))

    def test_hash_inside_string_is_not_comment(self):
        assert parse('mainmenu "a # b"').title == "a # b"

    def test_crlf(self):
        assert parse('config FOO\r\n\tbool "x"\r\n') == parse('config FOO\n\tbool "x"\n')

    @pytest.mark.parametrize("whitespace", ["\u00a0", "\u2003", "\v", "\f"])
    def test_other_whitespace_is_significant(self, whitespace):
        with pytest.raises(KconfigSyntaxError):
            parse(f'config FOO{whitespace}bool "x"')

    def test_only_comment(self):
        with pytest.raises(KconfigSyntaxError) as err:
            parse("# nothing here\n")
        assert err.value.offset == len("# nothing here\n")


class TestSyntaxErrors:
    def test_empty_input(self):
        with pytest.raises(KconfigSyntaxError) as err:
            parse("")
        assert err.value.offset == 0
        assert err.value.lineno == 1
        assert err.value.col == 1
        assert err.value.expected == ("config", "mainmenu")
        assert "found end of input" in str(err.value)

    def test_whitespace_only(self):
        with pytest.raises(KconfigSyntaxError) as err:
            parse("  \n\t ")
        assert err.value.offset == 5

    def test_furthest_failure(self):
        text = 'config FOO\n\tbool "x"\nfoo'
        with pytest.raises(KconfigSyntaxError) as err:
            parse(text)
        assert err.value.offset == text.index("foo")
        assert err.value.lineno == 3
        assert err.value.col == 1
        assert err.value.line == "foo"
        assert err.value.expected == ("config", "end of input", "mainmenu", "type name")
        assert "found 'foo'" in err.value.msg

    def test_keyword_followed_by_identifier(self):
        with pytest.raises(KconfigSyntaxError) as err:
            parse('mainmenu_x "a"')
        assert err.value.offset == 0
        assert err.value.expected == ("config", "mainmenu")
        assert err.value.msg == "Expected config or mainmenu, found 'mainmenu_x'"

    def test_missing_description(self):
        text = 'config FOO\n\tbool'
        with pytest.raises(KconfigSyntaxError) as err:
            parse(text)
        assert err.value.offset == len(text)
        assert err.value.expected == ("string",)

    def test_mainmenu_without_title(self):
        with pytest.raises(KconfigSyntaxError) as err:
            parse("mainmenu\nconfig FOO")
        assert err.value.offset == len("mainmenu\n")
        assert err.value.expected == ("string",)

    def test_lowercase_name(self):
        with pytest.raises(KconfigSyntaxError) as err:
            parse("config foo")
        assert err.value.offset == len("config ")
        assert "name" in err.value.expected

    def test_offset_with_tabs(self):
        text = '\t\tconfig FOO\n\t\t\tbool "x"\n\t\t\t?'
        with pytest.raises(KconfigSyntaxError) as err:
            parse(text)
        assert err.value.offset == text.index("?")
        assert err.value.col == 4

    def test_filename_in_message(self):
        with pytest.raises(KconfigSyntaxError) as err:
            Parser("Kconfig.test").parse_string("config FOO\n?")
        assert str(err.value).startswith("Kconfig.test:2:1: ")

    def test_explain(self):
        with pytest.raises(KconfigSyntaxError) as err:
            parse('config FOO\n\tbool "x" ?')
        assert err.value.explain().splitlines()[1:] == ['\tbool "x" ?', " " * 10 + "^"]

    def test_errors_share_base_class(self):
        for text in ("", 'mainmenu "\\q"'):
            with pytest.raises(KconfigParseError):
                parse(text)


class TestStrings:
    def test_escapes_decoded(self):
        document = parse('mainmenu "a\\nb\\tc\\"d\\u00e9"')
        assert document.title == 'a\nb\tc"dé'

    def test_unterminated_string(self):
        text = 'config X\n\tstring "abc'
        with pytest.raises(StringDecodeError) as err:
            parse(text)
        assert err.value.offset == text.index('"')
        assert err.value.escape == ""
        assert "unterminated" in err.value.msg

    def test_invalid_escape(self):
        text = 'config X\n\tstring "ab\\xcd"'
        with pytest.raises(StringDecodeError) as err:
            parse(text)
        assert err.value.offset == text.index("\\")
        assert err.value.escape == "\\x"
        assert err.value.lineno == 2

    def test_short_unicode_escape(self):
        with pytest.raises(StringDecodeError) as err:
            parse('mainmenu "\\u12g4"')
        assert err.value.escape == "\\u12"

    def test_surrogate_rejected(self):
        with pytest.raises(StringDecodeError) as err:
            parse('mainmenu "\\ud83d\\ude00"')
        assert err.value.escape == "\\ud83d"
        assert err.value.offset == len('mainmenu "')

    def test_string_error_is_not_backtracked(self):
        # a broken description must not be reported as a syntax error of the following items
        with pytest.raises(StringDecodeError):
            parse('config FOO\n\tbool "\\a"\nconfig BAR')

    def test_string_spanning_lines(self):
        assert parse('mainmenu "first\nsecond"').title == "first\nsecond"

    def test_empty_string(self):
        assert parse('config FOO\n\tstring ""').items[0].fields[0].description == ""


class TestParseFile:
    def test_parse_file(self, tmp_path):
        kconfig = tmp_path / "Kconfig"
        kconfig.write_text('mainmenu "Caf\u00e9"\nconfig FOO\n\tbool "x"\r\n', encoding="utf-8")
        document = parse_file(str(kconfig))
        assert document.title == "Café"
        assert document.find("FOO")

    def test_error_contains_filename(self, tmp_path):
        kconfig = tmp_path / "Kconfig"
        kconfig.write_text("config FOO\n\tbool\n", encoding="utf-8")
        with pytest.raises(KconfigSyntaxError) as err:
            parse_file(str(kconfig))
        assert err.value.filename == str(kconfig)
        assert str(kconfig) in str(err.value)


class TestIndependentParsers:
    def test_parser_is_reusable(self):
        parser = Parser()
        with pytest.raises(KconfigSyntaxError):
            parser.parse_string("config FOO\n?")
        assert parser.parse_string("config FOO") == Document((Config("FOO"),))

    def test_parallel_parsing(self):
        results = {}

        def worker(idx):
            text = "".join(f'config C_{"X" * (idx + 1)}_{"Y" * n}\n\tint "{n}"\n' for n in range(50))
            results[idx] = parse(text)

        threads = [threading.Thread(target=worker, args=(idx,)) for idx in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for idx, document in results.items():
            assert len(document) == 50
            assert all(config.name.startswith("C_" + "X" * (idx + 1) + "_") for config in document.configs)
        assert len(results) == 8

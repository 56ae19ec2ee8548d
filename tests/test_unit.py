"""
Unit Tests - Test individual components in isolation.
"""

import pytest

from tomlike.syntax import (
    DELIMITERS,
    MAX_LINE_WIDTH,
    ConfigError,
    check_key,
    describe,
)
from tomlike.stream import CharacterSource, iter_chunks
from tomlike.tokenizer import Token, TokenKind, Tokenizer, join_expected
from tomlike.document import AttrTable


def tokenizer(text: str) -> Tokenizer:
    return Tokenizer(CharacterSource.from_text(text))


# =============================================================================
# Syntax helpers
# =============================================================================

class TestSyntax:

    def test_delimiters(self):
        for char in "=\n;,()[]{}#":
            assert char in DELIMITERS
        assert " " not in DELIMITERS

    def test_line_width(self):
        assert MAX_LINE_WIDTH == 80

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            raise ConfigError("boom")

    def test_describe_string(self):
        assert describe("abc") == "'abc'"
        assert describe("\n") == "'\\n'"

    def test_describe_non_string_has_type(self):
        assert describe([1, 2]) == "[1, 2] [list]"
        assert describe(None) == "None [NoneType]"

    def test_describe_truncates(self):
        text = describe("x" * 100)
        assert text == "'" + "x" * 59 + " [+42]"

    def test_check_key_trims(self):
        assert check_key("  name ") == "name"
        assert check_key("a-b_C9") == "a-b_C9"

    def test_check_key_names_bad_character(self):
        with pytest.raises(ConfigError, match=r"invalid character '\.' in key 'a\.b'"):
            check_key("a.b")

    def test_check_key_rejects_blank(self):
        with pytest.raises(ConfigError, match="blank"):
            check_key("   ")

    def test_check_key_rejects_non_string(self):
        with pytest.raises(ConfigError, match="string expected"):
            check_key(1)


# =============================================================================
# CharacterSource
# =============================================================================

class TestCharacterSource:

    def test_reads_text(self):
        source = CharacterSource.from_text("ab")
        assert source.read() == "a"
        assert source.read() == "b"
        assert source.read() == ""
        assert source.read() == ""
        assert source.exhausted
        assert source.consumed == 2

    def test_text_chunks_verbatim(self):
        assert "".join(iter_chunks(["a = ", "1\n"])) == "a = 1\n"

    def test_byte_chunks(self):
        assert "".join(iter_chunks([b"a = ", b"1\n"])) == "a = 1\n"

    def test_split_four_byte_character(self):
        data = "😀".encode("utf-8")
        assert len(data) == 4
        assert "".join(iter_chunks([data[:2], data[2:]])) == "😀"

    def test_every_byte_split_of_multibyte_text(self):
        text = "é€😀"
        data = text.encode("utf-8")
        for cut in range(len(data) + 1):
            assert "".join(iter_chunks([data[:cut], data[cut:]])) == text

    def test_one_byte_per_chunk(self):
        text = "ключ = 'значение'"
        data = text.encode("utf-8")
        assert "".join(iter_chunks(data[i:i + 1] for i in range(len(data)))) == text

    def test_malformed_bytes_still_fail(self):
        with pytest.raises(UnicodeDecodeError):
            "".join(iter_chunks([b"a = \xff\n"]))

    def test_truncated_at_end_fails(self):
        with pytest.raises(UnicodeDecodeError):
            "".join(iter_chunks(["😀".encode("utf-8")[:3]]))

    def test_mode_fixed_by_first_chunk(self):
        with pytest.raises(ConfigError, match="text expected"):
            "".join(iter_chunks(["a = ", b"1"]))
        with pytest.raises(ConfigError, match="bytes expected"):
            "".join(iter_chunks([b"a = ", "1"]))

    def test_invalid_chunk_type(self):
        with pytest.raises(ConfigError, match="text or bytes expected"):
            "".join(iter_chunks([42]))

    def test_empty_iterable(self):
        assert "".join(iter_chunks([])) == ""


# =============================================================================
# Tokenizer primitives
# =============================================================================

class TestMatchUntil:

    def test_stops_at_delimiter(self):
        t = tokenizer("abc=rest")
        assert t.match_until("=") == ("abc", "=")
        assert t.source.read() == "r"

    def test_backslash_escapes_delimiter(self):
        t = tokenizer(r"a\=b=c")
        assert t.match_until("=") == ("a=b", "=")

    def test_backslash_escapes_backslash(self):
        t = tokenizer(r'a\\"')
        assert t.match_until('"') == ("a\\", '"')

    def test_end_allowed(self):
        t = tokenizer("abc")
        assert t.match_until("=", end_of_input=True) == ("abc", "")

    def test_end_not_allowed(self):
        t = tokenizer("  abc ")
        with pytest.raises(ConfigError, match=r"unexpected end of input \(from 'abc'\)"):
            t.match_until("=")

    def test_end_not_allowed_blank(self):
        t = tokenizer("")
        with pytest.raises(ConfigError, match=r"^unexpected end of input$"):
            t.match_until("=")


class TestMatchNext:

    def test_join_expected(self):
        assert join_expected((TokenKind.VALUE,)) == "value"
        assert join_expected((TokenKind.KEY, TokenKind.LINE_END, TokenKind.INPUT_END)) == (
            "key, line end or input end"
        )

    def test_list_divider(self):
        t = tokenizer("  , x")
        assert t.match_next((TokenKind.LIST_DIVIDER,)) == Token("", ",", TokenKind.LIST_DIVIDER)

    def test_list_end(self):
        t = tokenizer(" )")
        assert t.match_next((TokenKind.LIST_END,)) == Token("", ")", TokenKind.LIST_END)

    def test_input_end(self):
        t = tokenizer("   ")
        assert t.match_next((TokenKind.INPUT_END,)).kind is TokenKind.INPUT_END

    def test_comment_skipped(self):
        t = tokenizer("# a comment, with ] stuff\n ,")
        token = t.match_next((TokenKind.LINE_END, TokenKind.LIST_DIVIDER))
        assert token.kind is TokenKind.LIST_DIVIDER

    def test_comment_backslash_is_literal(self):
        t = tokenizer("# c:\\\n,")
        token = t.match_next((TokenKind.LINE_END, TokenKind.LIST_DIVIDER))
        assert token.kind is TokenKind.LIST_DIVIDER

    def test_value_hooks_need_parser(self):
        t = tokenizer("'x'")
        with pytest.raises(NotImplementedError):
            t.match_next((TokenKind.VALUE,))

    def test_new_line_returns_line_end(self):
        t = tokenizer("  # trailing\nnext")
        token = t.match_next((TokenKind.LINE_END,), new_line=True)
        assert token == Token("", "\n", TokenKind.LINE_END)
        assert t.source.read() == "n"

    def test_start_character_used_first(self):
        t = tokenizer("")
        token = t.match_next((TokenKind.LIST_END,), start="]")
        assert token.end == "]"

    def test_unexpected_kind_message(self):
        t = tokenizer("\n")
        with pytest.raises(ConfigError, match=r"line end '\\n' reached but value expected"):
            t.match_next((TokenKind.VALUE,))

    def test_unexpected_input_end_message(self):
        t = tokenizer("")
        with pytest.raises(ConfigError, match="^input end reached but value or list end expected$"):
            t.match_next((TokenKind.VALUE, TokenKind.LIST_END))

    def test_unknown_character(self):
        t = tokenizer(";")
        with pytest.raises(ConfigError, match="unknown ';' reached but value expected"):
            t.match_next((TokenKind.VALUE,))


# =============================================================================
# AttrTable
# =============================================================================

class TestAttrTable:

    def test_get_and_set(self):
        table = AttrTable(name="demo")
        assert table.name == "demo"
        table.port = 8080
        assert table["port"] == 8080

    def test_delete(self):
        table = AttrTable(a=1)
        del table.a
        assert "a" not in table
        with pytest.raises(AttributeError):
            del table.a

    def test_missing_entry(self):
        with pytest.raises(AttributeError, match="'missing'"):
            AttrTable().missing

    def test_dict_methods_win(self):
        table = AttrTable(items=[1, 2])
        assert callable(table.items)
        assert table.key_items == [1, 2]

    def test_escape_prefix_stripped_once(self):
        table = AttrTable({"key_x": 1})
        assert table.key_key_x == 1
        table.key_get = 2
        assert table["get"] == 2

    def test_non_identifier_keys(self):
        table = AttrTable({"max-size": 10})
        assert getattr(table, "max-size") == 10

    def test_equal_to_dict(self):
        assert AttrTable(a=1, b=[2]) == {"a": 1, "b": [2]}

    def test_dir_lists_entries(self):
        table = AttrTable({"alpha": 1, "not-an-id": 2})
        assert "alpha" in dir(table)
        assert "not-an-id" not in dir(table)

    def test_repr(self):
        assert repr(AttrTable(a=1)) == "AttrTable({'a': 1})"

import logging

import pytest

from robotspolicy.directives import DirectiveKind, decode, tokenize


def test_field_names_case_insensitive():
    ds = tokenize("USER-AGENT: a\nallow: /x\nDisAllow: /y\nSITEMAP: s\ncrawl-DELAY: 3\n")
    assert [d.kind for d in ds] == [
        DirectiveKind.USER_AGENT,
        DirectiveKind.ALLOW,
        DirectiveKind.DISALLOW,
        DirectiveKind.SITEMAP,
        DirectiveKind.CRAWL_DELAY,
    ]


def test_trailing_comment_and_whitespace_removed():
    (d,) = tokenize("Disallow: /foo  # block foo")
    assert d.kind is DirectiveKind.DISALLOW
    assert d.value == "/foo"


def test_escaped_hash_is_unescaped():
    (d,) = tokenize(r"Disallow: /a\#b # real comment")
    assert d.value == "/a#b"


def test_blank_and_comment_lines_skipped_line_numbers_kept():
    ds = tokenize("# header\n\n   \nUser-agent: *\n# note\nDisallow: /x\n")
    assert [(d.kind, d.line) for d in ds] == [
        (DirectiveKind.USER_AGENT, 4),
        (DirectiveKind.DISALLOW, 6),
    ]


def test_internal_whitespace_preserved():
    (d,) = tokenize("User-agent:   My Bot  \n")
    assert d.value == "My Bot"


def test_line_without_colon_is_unknown():
    ds = tokenize("this is not a directive\nDisallow /x\n")
    assert all(d.kind is DirectiveKind.UNKNOWN for d in ds)


def test_unrecognised_field_is_unknown():
    (d,) = tokenize("Host: example.com")
    assert d.kind is DirectiveKind.UNKNOWN
    assert d.field == "Host"
    assert d.value == "example.com"


def test_literal_unknown_field_name_is_not_special():
    (d,) = tokenize("unknown: x")
    assert d.kind is DirectiveKind.UNKNOWN


def test_crlf_and_lf_mixed():
    ds = tokenize(b"User-agent: *\r\nDisallow: /a\nAllow: /b\r\n")
    assert [d.value for d in ds] == ["*", "/a", "/b"]


def test_value_keeps_colons():
    (d,) = tokenize("Sitemap: https://example.com:8080/sitemap.xml")
    assert d.value == "https://example.com:8080/sitemap.xml"


def test_decode_strips_bom_and_replaces_bad_bytes():
    assert decode(b"\xef\xbb\xbfUser-agent: *") == "User-agent: *"
    assert decode("\ufeffAllow: /") == "Allow: /"
    assert decode(b"Disallow: /\xff") == "Disallow: /\ufffd"


def test_decode_rejects_non_text():
    with pytest.raises(TypeError):
        decode(None)


def test_ignored_lines_logged_at_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="robotspolicy")
    tokenize("Host: example.com\nno colon here\nUser-agent: *\n")
    messages = [r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG]
    assert "line 1: unknown field 'Host'" in messages
    assert any(m.startswith("line 2 has no ':'") for m in messages)

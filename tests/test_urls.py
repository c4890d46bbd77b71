"""Tests for url() rewriting."""
from __future__ import annotations

from urllib.parse import urljoin

import pytest

from pagesnap.urls import absolutize_url, rewrite_css_urls

BASE = "https://cdn.example.com/css/site.css"


def test_rewrites_unquoted_relative_reference() -> None:
    css = ".hero { background: url(img/hero.png) no-repeat; }"
    assert rewrite_css_urls(css, BASE) == (
        '.hero { background: url("https://cdn.example.com/css/img/hero.png") no-repeat; }'
    )


def test_rewrites_quoted_references() -> None:
    css = "@font-face { src: url('../fonts/a.woff2') format('woff2'), url( \"b.woff\" ); }"
    rewritten = rewrite_css_urls(css, BASE)
    assert 'url("https://cdn.example.com/fonts/a.woff2")' in rewritten
    assert 'url("https://cdn.example.com/css/b.woff")' in rewritten


def test_scheme_relative_and_root_relative() -> None:
    css = "a { background: url(//static.example.org/x.png) } b { background: url(/y.png) }"
    rewritten = rewrite_css_urls(css, BASE)
    assert 'url("https://static.example.org/x.png")' in rewritten
    assert 'url("https://cdn.example.com/y.png")' in rewritten


def test_case_insensitive_function_name() -> None:
    assert rewrite_css_urls("a{b:URL(x.png)}", BASE) == 'a{b:url("https://cdn.example.com/css/x.png")}'


@pytest.mark.parametrize(
    "reference",
    [
        "url(data:image/png;base64,AAAA)",
        "url('data:image/svg+xml;utf8,<svg></svg>')",
        "url(blob:https://example.com/1234)",
        "url(about:blank)",
        "url(#gradient)",
    ],
)
def test_leaves_special_references_alone(reference: str) -> None:
    css = f"a {{ background: {reference}; }}"
    assert rewrite_css_urls(css, BASE) == css


def test_absolute_references_are_unchanged() -> None:
    css = 'a { background: url(https://x.test/a.png) } b { background: url("http://y.test/b.png") }'
    assert rewrite_css_urls(css, BASE) == css


def test_rewriting_is_idempotent() -> None:
    css = ".a { background: url(a.png) } .b { background: url('../b.png') }"
    once = rewrite_css_urls(css, BASE)
    assert rewrite_css_urls(once, BASE) == once


def test_rewritten_references_match_direct_resolution() -> None:
    css = ".a { background: url(../img/a.png?v=2#frag) }"
    rewritten = rewrite_css_urls(css, BASE)
    assert f'url("{urljoin(BASE, "../img/a.png?v=2#frag")}")' in rewritten


def test_malformed_reference_is_left_byte_for_byte() -> None:
    css = "a { background: url(http://[::1/a.png) }"
    assert rewrite_css_urls(css, BASE) == css


def test_without_base_text_is_unchanged() -> None:
    css = "a { background: url(a.png) }"
    assert rewrite_css_urls(css, None) == css
    assert rewrite_css_urls(css, "") == css


# ---------------------------------------------------------------------------
# absolutize_url
# ---------------------------------------------------------------------------


def test_absolutize_url_resolves_relative_paths() -> None:
    assert absolutize_url("img/a.png", "https://example.com/docs/") == "https://example.com/docs/img/a.png"


def test_absolutize_url_keeps_fragments_and_data() -> None:
    assert absolutize_url("#top", "https://example.com/") == "#top"
    assert absolutize_url("data:,hi", "https://example.com/") == "data:,hi"
    assert absolutize_url("", "https://example.com/") == ""


def test_absolutize_url_without_base() -> None:
    assert absolutize_url("a.png", None) == "a.png"


# ---------------------------------------------------------------------------
# Token boundaries
# ---------------------------------------------------------------------------


def test_quoted_reference_containing_parenthesis() -> None:
    css = 'a { background: url("img(1).png") }'
    assert rewrite_css_urls(css, BASE) == 'a { background: url("https://cdn.example.com/css/img(1).png") }'


def test_quoted_reference_containing_apostrophe() -> None:
    css = "a { background: url(\"it's.png\") }"
    assert rewrite_css_urls(css, BASE) == "a { background: url(\"https://cdn.example.com/css/it's.png\") }"


def test_url_inside_string_literal_is_not_rewritten() -> None:
    css = 'a::after { content: "see url(x.png)" }'
    assert rewrite_css_urls(css, BASE) == css


def test_url_inside_comment_is_not_rewritten() -> None:
    css = "/* url(old.png) */ a { background: url(new.png) }"
    assert rewrite_css_urls(css, BASE) == (
        '/* url(old.png) */ a { background: url("https://cdn.example.com/css/new.png") }'
    )


def test_references_across_lines_keep_surrounding_text() -> None:
    css = "a {\r\n  background: url(a.png);\n}\n@media screen {\n  b { mask: url( 'b.svg' ) }\n}"
    assert rewrite_css_urls(css, BASE) == (
        "a {\r\n  background: url(\"https://cdn.example.com/css/a.png\");\n}\n"
        "@media screen {\n  b { mask: url(\"https://cdn.example.com/css/b.svg\") }\n}"
    )


def test_reference_nested_in_another_function() -> None:
    css = "a { background: image-set(url(a.png) 1x, url(b.png) 2x) }"
    rewritten = rewrite_css_urls(css, BASE)
    assert 'image-set(url("https://cdn.example.com/css/a.png") 1x, ' in rewritten
    assert 'url("https://cdn.example.com/css/b.png") 2x)' in rewritten

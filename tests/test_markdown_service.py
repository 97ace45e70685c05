"""Tests for the Markdown renderer."""

from tagnote.client.create_form import PLACEHOLDER_MARKDOWN
from tagnote.services.markdown_service import (
    BLOCK_CODE_CLASS,
    ELEMENT_CLASSES,
    INLINE_CODE_CLASS,
    is_safe_url,
    render_markdown,
)


class TestRenderMarkdown:
    def test_empty(self):
        assert render_markdown("") == ""

    def test_heading_and_paragraph_classes(self):
        html = render_markdown("# タイトル\n\n本文です")
        assert f'<h1 class="{ELEMENT_CLASSES["h1"]}">タイトル</h1>' in html
        assert f'<p class="{ELEMENT_CLASSES["p"]}">本文です</p>' in html

    def test_lists_and_links(self):
        html = render_markdown("- a\n- [link](https://example.com)\n\n1. one\n2. two")
        assert f'<ul class="{ELEMENT_CLASSES["ul"]}">' in html
        assert f'<ol class="{ELEMENT_CLASSES["ol"]}">' in html
        assert f'class="{ELEMENT_CLASSES["a"]}"' in html
        assert 'href="https://example.com"' in html

    def test_inline_code(self):
        html = render_markdown("call `sync()` now")
        assert f'<code class="{INLINE_CODE_CLASS}">sync()</code>' in html

    def test_fenced_code_block_keeps_language(self):
        html = render_markdown("```tsx\nconst a = 1;\n```")
        assert f'<pre><code class="{BLOCK_CODE_CLASS} language-tsx">' in html
        assert INLINE_CODE_CLASS not in html
        assert html.startswith("<pre>")

    def test_indented_code_block(self):
        html = render_markdown("text\n\n    plain code\n")
        assert f'<pre><code class="{BLOCK_CODE_CLASS}">plain code' in html

    def test_blockquote(self):
        html = render_markdown("> quoted")
        assert f'<blockquote class="{ELEMENT_CLASSES["blockquote"]}">' in html

    def test_raw_html_is_escaped(self):
        html = render_markdown('<script>alert("x")</script>')
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_script_link_loses_href(self):
        html = render_markdown("[click](javascript:alert(document.cookie))")
        assert "javascript:" not in html
        assert ">click</a>" in html

    def test_obfuscated_scheme_is_dropped(self):
        html = render_markdown("[a](JaVaScRiPt:alert(1)) [b](data:text/html;base64,PHNjcmlwdD4=)")
        assert "JaVaScRiPt" not in html
        assert "data:" not in html

    def test_image_with_unsafe_src_is_blanked(self):
        html = render_markdown("![x](javascript:alert(1))")
        assert "javascript:" not in html
        assert 'src=""' in html

    def test_safe_links_survive(self):
        html = render_markdown("[a](https://example.com) [b](/memos/1) [c](#top) [d](mailto:a@example.com)")
        assert 'href="https://example.com"' in html
        assert 'href="/memos/1"' in html
        assert 'href="#top"' in html
        assert 'href="mailto:a@example.com"' in html


class TestIsSafeUrl:
    def test_allowed(self):
        for url in ("https://x.test", "HTTP://x.test", "mailto:a@b.c", "/a/b", "a/b:c", "?q=1:2", "#top", ""):
            assert is_safe_url(url), url

    def test_rejected(self):
        for url in ("javascript:alert(1)", " java\tscript:alert(1)", "&#106;avascript:alert(1)", "vbscript:x", "data:text/html,x"):
            assert not is_safe_url(url), url


class TestGfmFeatures:
    def test_placeholder_task_list_renders_checkboxes(self):
        html = render_markdown(PLACEHOLDER_MARKDOWN)
        assert html.count('type="checkbox"') == 3
        assert html.count("checked") == 1
        assert "[ ]" not in html
        assert "[x]" not in html
        assert "task-list-item" in html

    def test_task_list_keeps_item_classes(self):
        html = render_markdown("- [ ] todo")
        assert ELEMENT_CLASSES["li"] in html
        assert "task-list-item" in html

    def test_strikethrough(self):
        html = render_markdown("~~old~~ new")
        assert "<del>old</del>" in html

    def test_bare_url_becomes_link(self):
        html = render_markdown("see https://example.com/page for details")
        assert 'href="https://example.com/page"' in html
        assert ELEMENT_CLASSES["a"] in html

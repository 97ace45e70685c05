"""
Markdown 렌더링 - 작성 미리보기 / 목록 / 상세 화면 공용

요소마다 CSS 클래스를 붙인 HTML 조각을 만든다. 입력의 raw HTML은 이스케이프된다.
체크리스트, 취소선, 맨 URL 자동 링크는 pymdown-extensions로 처리한다.
링크/이미지 주소는 http, https, mailto, 상대 경로, #앵커만 남긴다.
"""

from typing import Dict
import html
import re

import markdown
from markdown import util
from markdown.extensions import Extension
from markdown.postprocessors import Postprocessor
from markdown.treeprocessors import Treeprocessor


ELEMENT_CLASSES: Dict[str, str] = {
    "h1": "text-xl font-semibold text-slate-900",
    "h2": "text-lg font-semibold text-slate-900",
    "h3": "text-base font-semibold text-slate-900",
    "p": "leading-relaxed text-slate-700",
    "ul": "list-disc space-y-1 pl-5 text-slate-700",
    "ol": "list-decimal space-y-1 pl-5 text-slate-700",
    "li": "leading-relaxed",
    "blockquote": "border-l-4 border-slate-200 pl-4 italic text-slate-700",
    "a": "underline decoration-slate-300 underline-offset-4 transition hover:text-slate-900",
}
INLINE_CODE_CLASS = "rounded-md bg-slate-100 px-1.5 py-0.5 text-[0.9em] text-slate-900"
BLOCK_CODE_CLASS = "block w-full rounded-lg bg-slate-900 px-3 py-2 text-sm text-white shadow-inner shadow-black/20"

SAFE_URL_SCHEMES = frozenset({"http", "https", "mailto"})

_BLOCK_CODE_RE = re.compile(r'<pre><code(?: class="([^"]*)")?>')
_URL_NOISE_RE = re.compile(r"[\x00-\x20\x7f]")


def is_safe_url(url: str) -> bool:
    """허용된 스킴이거나 스킴 없는 상대 주소인지"""
    value = _URL_NOISE_RE.sub("", html.unescape(url or ""))
    scheme, sep, _ = value.partition(":")
    if not sep:
        return True
    # ':' 앞에 경로/쿼리/앵커 구분자가 있으면 스킴이 아니다
    if any(ch in scheme for ch in "/?#"):
        return True
    return scheme.lower() in SAFE_URL_SCHEMES


def _add_class(element, css: str) -> None:
    current = element.get("class")
    element.set("class", f"{current} {css}" if current else css)


class _StyleTreeprocessor(Treeprocessor):
    """요소 종류별로 class 속성 부여 (코드 블록 제외)"""

    def run(self, root):
        block_codes = {code for pre in root.iter("pre") for code in pre.iter("code")}
        for element in root.iter():
            if element.tag == "code":
                if element not in block_codes:
                    _add_class(element, INLINE_CODE_CLASS)
                continue
            # fenced 코드 자리표시 문단은 원래 <p>로 남겨야 raw_html 복원 시 치환된다
            if element.tag == "p" and len(element) == 0 and util.HTML_PLACEHOLDER_RE.fullmatch((element.text or "").strip()):
                continue
            css = ELEMENT_CLASSES.get(element.tag)
            if css:
                _add_class(element, css)
        return None


class _SafeUrlTreeprocessor(Treeprocessor):
    """javascript:, data: 등 허용되지 않은 스킴의 href/src 제거"""

    def run(self, root):
        for element in root.iter():
            href = element.get("href")
            if href is not None and not is_safe_url(href):
                del element.attrib["href"]
            src = element.get("src")
            if src is not None and not is_safe_url(src):
                element.set("src", "")
        return None


class _BlockCodePostprocessor(Postprocessor):
    """코드 블록 class 부여 - fenced 코드는 raw HTML로 복원되므로 문자열 단계에서 처리"""

    def run(self, text):
        def _merge(match):
            language = match.group(1)
            css = f"{BLOCK_CODE_CLASS} {language}" if language else BLOCK_CODE_CLASS
            return f'<pre><code class="{css}">'
        return _BLOCK_CODE_RE.sub(_merge, text)


class StyleExtension(Extension):
    """스타일 클래스 부여 + raw HTML 비활성화 + 주소 스킴 제한

    md_in_html이 html_block을 다시 등록하므로 확장 목록의 마지막에 둔다.
    """

    def extendMarkdown(self, md):
        md.preprocessors.deregister("html_block")
        md.inlinePatterns.deregister("html")
        # inline(20) 처리 이후에 실행
        md.treeprocessors.register(_SafeUrlTreeprocessor(md), "tagnote_safe_url", 1)
        md.treeprocessors.register(_StyleTreeprocessor(md), "tagnote_style", 0)
        # raw_html(30) 복원 이후에 실행
        md.postprocessors.register(_BlockCodePostprocessor(md), "tagnote_block_code", 5)


def _build_renderer() -> markdown.Markdown:
    return markdown.Markdown(
        extensions=[
            "extra",
            "sane_lists",
            "pymdownx.tasklist",
            "pymdownx.tilde",
            "pymdownx.magiclink",
            StyleExtension(),
        ],
        extension_configs={
            "pymdownx.tilde": {"subscript": False},
        },
        output_format="html",
    )


def render_markdown(text: str) -> str:
    """Markdown 텍스트를 스타일이 적용된 HTML 조각으로 변환"""
    if not text:
        return ""
    return _build_renderer().convert(text)

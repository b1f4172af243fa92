"""
阅读时长估算（分钟）：
- 中/韩文按字符计：600 字/分钟
- 英文按单词计：220 词/分钟
- 每张图片 +5 秒，<pre> 代码块每行 +2 秒
- 不足 0.5 分钟四舍五入，≥0.5 向上取整，最少 1 分钟
"""
import math
import re

CJK_CHARS_PER_MIN = 600
ENGLISH_WORDS_PER_MIN = 220
IMAGE_TIME_SEC = 5
CODE_LINE_TIME_SEC = 2

_PRE_RE = re.compile(r"<pre[\s\S]*?</pre>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_ENTITY_RE = re.compile(r"&[a-z]+;", re.IGNORECASE)
_IMG_RE = re.compile(r"<img[^>]*>", re.IGNORECASE)
_CJK_RE = re.compile(r"[一-鿿가-힣]")
_WORD_RE = re.compile(r"[A-Za-z]+")


def calculate_reading_time(html: str) -> int:
    html = html or ""
    text = _PRE_RE.sub("", html)
    text = _TAG_RE.sub(" ", text)
    text = _ENTITY_RE.sub(" ", text)
    text = re.sub(r"\s+", " ", text).strip()

    cjk_chars = len(_CJK_RE.findall(text))
    english_words = len(_WORD_RE.findall(text))
    images = len(_IMG_RE.findall(html))
    code_lines = sum(len(block.split("\n")) for block in _PRE_RE.findall(html))

    minutes = (
        cjk_chars / CJK_CHARS_PER_MIN
        + english_words / ENGLISH_WORDS_PER_MIN
        + images * IMAGE_TIME_SEC / 60
        + code_lines * CODE_LINE_TIME_SEC / 60
    )
    rounded = math.ceil(minutes) if minutes >= 0.5 else round(minutes)
    return max(1, rounded)

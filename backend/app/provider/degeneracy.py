"""
退化输出检测：识别语法上合法但毫无意义的模型输出（重复、乱码、幻觉套话）。

每条规则都是独立的函数，阈值以具名常量给出。
"""

from __future__ import annotations

import re

REPEATED_SEGMENT_MIN_LENGTH = 30
REPEATED_SEGMENT_MIN_REPEATS = 3
GREETING_MIN_REPEATS = 5
CHAR_RUN_MIN_LENGTH = 10
UNIQUENESS_MIN_TOKENS = 10
UNIQUENESS_MIN_RATIO = 0.2

GREETING_TOKENS = ("hello", "hey", "hi")
HALLUCINATION_PHRASES = (
    "what's one plus one",
    "whats one plus one",
    "what is one plus one",
)

_GREETING_RE = re.compile(
    r"(%s)\1{%d,}" % ("|".join(GREETING_TOKENS), GREETING_MIN_REPEATS - 1)
)
# 空白、数字与 Markdown / 代码分隔符（---、===、***、###、~~~、___）不计入
_CHAR_RUN_RE = re.compile(r"([^\s\d\-=_*#~])\1{%d,}" % (CHAR_RUN_MIN_LENGTH - 1))
_WHITESPACE_RE = re.compile(r"\s+")


def _period_run_reaches(text: str, start: int, period: int, needed: int) -> bool:
    """以 text[start:start+period] 为起点，向两侧统计 text[k] == text[k + period] 的连续长度。"""
    n = len(text)
    left = 0
    k = start - 1
    while k >= 0 and left + period < needed and text[k] == text[k + period]:
        left += 1
        k -= 1
    right = 0
    k = start + period
    while k + period < n and left + period + right < needed and text[k] == text[k + period]:
        right += 1
        k += 1
    return left + period + right >= needed


def has_repeated_segment(text: str) -> bool:
    """
    长度 >= 30 的片段连续出现 >= 3 次。

    等价于：存在周期 p >= 30，使 text[k] == text[k + p] 连续成立至少 2p 个位置。
    这样的连续区间必然完整覆盖某个按 p 对齐的块，因此每个周期只需比较 n / p 个块，
    整体约 O(n log n) 次切片比较。
    """
    n = len(text)
    copies = REPEATED_SEGMENT_MIN_REPEATS
    prefix = REPEATED_SEGMENT_MIN_LENGTH // 4
    for period in range(REPEATED_SEGMENT_MIN_LENGTH, n // copies + 1):
        needed = (copies - 1) * period
        for start in range(0, n - 2 * period + 1, period):
            mirror = start + period
            if text[start : start + prefix] != text[mirror : mirror + prefix]:
                continue
            if text[start:mirror] != text[mirror : mirror + period]:
                continue
            if _period_run_reaches(text, start, period, needed):
                return True
    return False


def has_repeated_greeting(text: str) -> bool:
    """去掉空白后 hello / hi / hey 连续出现 >= 5 次"""
    compact = _WHITESPACE_RE.sub("", text).lower()
    return _GREETING_RE.search(compact) is not None


def has_character_run(text: str) -> bool:
    """同一字符（不含空白、数字与分隔符）连续出现 >= 10 次"""
    return _CHAR_RUN_RE.search(text) is not None


def has_hallucination_phrase(text: str) -> bool:
    lowered = text.lower().replace("’", "'")
    return any(phrase in lowered for phrase in HALLUCINATION_PHRASES)


def has_low_token_diversity(text: str) -> bool:
    """>= 10 个空白分隔的 token 且去重后占比 < 20%"""
    tokens = text.lower().split()
    if len(tokens) < UNIQUENESS_MIN_TOKENS:
        return False
    return len(set(tokens)) / len(tokens) < UNIQUENESS_MIN_RATIO


_RULES = (
    has_repeated_segment,
    has_repeated_greeting,
    has_character_run,
    has_hallucination_phrase,
    has_low_token_diversity,
)


def is_degenerate(text: str) -> bool:
    return any(rule(text) for rule in _RULES)


__all__ = [
    "CHAR_RUN_MIN_LENGTH",
    "GREETING_MIN_REPEATS",
    "REPEATED_SEGMENT_MIN_LENGTH",
    "REPEATED_SEGMENT_MIN_REPEATS",
    "UNIQUENESS_MIN_RATIO",
    "UNIQUENESS_MIN_TOKENS",
    "has_character_run",
    "has_hallucination_phrase",
    "has_low_token_diversity",
    "has_repeated_greeting",
    "has_repeated_segment",
    "is_degenerate",
]

"""Extract scores and justification from a judge's free-text reply.

The judge's formatting drifts between plain labels (``Context Score: 75``),
emphasised labels (``**Context Score:** 51/300``) and split emphasis
(``**Context Score**: 50/300``), sometimes inside a code fence. Each field
is tried against those forms in order; a field with no match is an error,
never a silent zero.
"""

import re
from dataclasses import dataclass

from .errors import ResponseParseError


@dataclass(frozen=True)
class ParsedJudgement:
    context_score: int
    technical_score: int
    clarity_score: int
    total_score: int
    justification: str


_FENCE_RE = re.compile(r'\A\s*```[\w-]*[ \t]*\n?(.*?)\n?```\s*\Z', re.S)
_HEADERS = (
    re.compile(r'^###\s*Evaluation:?\s*', re.I),
    re.compile(r'^(?:\*\*)?Evaluation:?(?:\*\*)?:?[ \t]*\n?', re.I),
)

# (field name, label, denominator)
SCORE_FIELDS = (
    ('context_score', 'Context Score', 300),
    ('technical_score', 'Technical Score', 400),
    ('clarity_score', 'Clarity Score', 300),
    ('total_score', 'Final Score', 1000),
)


def _label(label):
    return r'\s+'.join(re.escape(part) for part in label.split())


def _score_patterns(label, denominator):
    value = r'(\d+)(?:\s*/\s*%d)?' % denominator
    lbl = _label(label)
    return (
        re.compile(r'\*\*%s:\*\*\s*%s' % (lbl, value), re.I),
        re.compile(r'\*\*%s\*\*:\s*%s' % (lbl, value), re.I),
        re.compile(r'%s:\s*%s' % (lbl, value), re.I),
    )


_SCORE_PATTERNS = {
    name: _score_patterns(label, denominator) for name, label, denominator in SCORE_FIELDS
}

_JUSTIFICATION_PATTERNS = (
    re.compile(r'\*\*Justification:\*\*\s*(.+?)(?=\n\s*\*\*|\Z)', re.I | re.S),
    re.compile(r'\*\*Justification\*\*:\s*(.+?)(?=\n\s*\*\*|\Z)', re.I | re.S),
    # Plain form stops at the next Title Case "Label:" line
    re.compile(r'(?i:Justification):\s*(.+?)(?=\n[ \t]*[A-Z][a-z]*(?:[ \t]+[A-Z][a-z]*)*:|\Z)', re.S),
)


def normalize_response(text):
    """Drop a wrapping code fence and a leading Evaluation header."""
    text = (text or '').strip()
    fence = _FENCE_RE.match(text)
    if fence:
        text = fence.group(1).strip()
    for header in _HEADERS:
        text = header.sub('', text, count=1)
    return text


def _first_match(patterns, text):
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match
    return None


def parse_judge_response(text):
    """Parse a judge reply into a :class:`ParsedJudgement`.

    Raises :class:`ResponseParseError` naming the first field that could
    not be found.
    """
    body = normalize_response(text)

    scores = {}
    for name, label, _ in SCORE_FIELDS:
        match = _first_match(_SCORE_PATTERNS[name], body)
        if not match:
            raise ResponseParseError(label)
        scores[name] = int(match.group(1))

    match = _first_match(_JUSTIFICATION_PATTERNS, body)
    justification = match.group(1).strip() if match else ''
    if not justification:
        raise ResponseParseError('Justification')

    return ParsedJudgement(justification=justification, **scores)

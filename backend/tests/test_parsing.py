import pytest

from promptquiz.services.quiz.errors import ResponseParseError
from promptquiz.services.quiz.parsing import ParsedJudgement, parse_judge_response


PLAIN = (
    "Context Score: 250\n"
    "Technical Score: 300\n"
    "Clarity Score: 180\n"
    "Final Score: 730\n"
    "Justification:   Creative persona, slightly off topic.  "
)

EXPECTED = ParsedJudgement(
    context_score=250,
    technical_score=300,
    clarity_score=180,
    total_score=730,
    justification='Creative persona, slightly off topic.',
)


def test_plain_labels():
    assert parse_judge_response(PLAIN) == EXPECTED


def test_emphasized_labels_with_denominators():
    text = (
        "**Context Score:** 250/300\n"
        "**Technical Score:** 300/400\n"
        "**Clarity Score:** 180/300\n"
        "**Final Score:** 730/1000\n"
        "**Justification:** Creative persona, slightly off topic."
    )
    assert parse_judge_response(text) == EXPECTED


def test_split_emphasis_labels():
    text = (
        "**Context Score**: 250/300\n"
        "**Technical Score**: 300 / 400\n"
        "**Clarity Score**: 180\n"
        "**Final Score**: 730/1000\n"
        "**Justification**: Creative persona, slightly off topic."
    )
    assert parse_judge_response(text) == EXPECTED


def test_code_fence_and_evaluation_header_are_stripped():
    text = "```markdown\n### Evaluation:\n" + PLAIN + "\n```"
    assert parse_judge_response(text) == EXPECTED

    text = "**Evaluation**\n" + PLAIN
    assert parse_judge_response(text) == EXPECTED


def test_emphasized_justification_spans_lines_until_next_label():
    text = (
        "**Justification:** Strong start.\nLoses focus near the end.\n"
        "**Context Score:** 10/300\n"
        "**Technical Score:** 20/400\n"
        "**Clarity Score:** 30/300\n"
        "**Final Score:** 60/1000"
    )
    parsed = parse_judge_response(text)
    assert parsed.justification == 'Strong start.\nLoses focus near the end.'
    assert parsed.total_score == 60


def test_plain_justification_stops_at_next_label():
    text = (
        "Justification: Answers the question: mostly.\n"
        "Context Score: 1\n"
        "Technical Score: 2\n"
        "Clarity Score: 3\n"
        "Final Score: 6"
    )
    parsed = parse_judge_response(text)
    assert parsed.justification == 'Answers the question: mostly.'
    assert (parsed.context_score, parsed.technical_score, parsed.clarity_score) == (1, 2, 3)


@pytest.mark.parametrize('label', ['Context Score', 'Technical Score', 'Clarity Score', 'Final Score'])
def test_missing_score_names_the_field(label):
    text = '\n'.join(line for line in PLAIN.splitlines() if not line.startswith(label))
    with pytest.raises(ResponseParseError) as excinfo:
        parse_judge_response(text)
    assert excinfo.value.field == label
    assert str(excinfo.value) == f"Could not parse {label}"


def test_missing_justification():
    text = PLAIN.split('Justification')[0]
    with pytest.raises(ResponseParseError) as excinfo:
        parse_judge_response(text)
    assert excinfo.value.field == 'Justification'


def test_never_defaults_to_zero():
    with pytest.raises(ResponseParseError):
        parse_judge_response('I liked it a lot, maybe 9 out of 10.')

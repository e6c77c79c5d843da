import pytest

from shikhi.services.quiz_scoring import normalise_answers, percent, score_mcq

from factories import mcq_quiz


def questions(correct):
    return mcq_quiz(correct=correct)["quizData"]["mcqQuestions"]


def test_all_correct_scores_100():
    qs = questions([0, 1, 2, 1, 0])
    result = score_mcq(qs, {0: 0, 1: 1, 2: 2, 3: 1, 4: 0})
    assert result.score == 100
    assert result.correct_answers == 5
    assert result.total_questions == 5


def test_no_answers_scores_zero():
    result = score_mcq(questions([0, 1, 2]), {})
    assert result.score == 0
    assert result.correct_answers == 0


def test_zero_questions_scores_zero():
    result = score_mcq([], {0: 1})
    assert result.score == 0
    assert result.total_questions == 0


def test_three_of_four_scores_75():
    qs = questions([0, 1, 2, 0])
    result = score_mcq(qs, {0: 0, 1: 1, 2: 2, 3: 1})
    assert result.score == 75
    assert result.correct_answers == 3


def test_json_string_keys_are_accepted():
    qs = questions([1, 1])
    assert score_mcq(qs, {"0": 1, "1": "1"}).score == 100


def test_out_of_range_and_junk_selections_count_as_wrong():
    qs = questions([0, 0, 0])
    result = score_mcq(qs, {0: 7, 1: -1, "x": 0, 2: 0})
    assert result.correct_answers == 1


@pytest.mark.parametrize(
    "correct,total,expected",
    [
        (1, 8, 13),  # 12.5 rounds up
        (1, 3, 33),
        (2, 3, 67),
        (5, 8, 63),  # 62.5 rounds up
        (0, 0, 0),
    ],
)
def test_percent_rounds_half_up(correct, total, expected):
    assert percent(correct, total) == expected


def test_normalise_answers_drops_unparseable_entries():
    assert normalise_answers({"0": "2", "a": 1, "1": None}) == {0: 2}

import pytest
from pydantic import ValidationError as PydanticValidationError

from quizcraft.components import TEAM, UserProfile, build_user_card
from quizcraft.models import AnalysisResult, Question, Test, TestSpec
from quizcraft.validation import ValidationError, validate_analysis, validate_questions


def test_question_requires_four_distinct_options():
    with pytest.raises(PydanticValidationError):
        Question(text="Q", options=["a", "b", "c"], correct_answer="a")
    with pytest.raises(PydanticValidationError):
        Question(text="Q", options=["a", "a", "b", "c"], correct_answer="a")


def test_question_accepts_camel_case_payload():
    question = Question.model_validate(
        {"text": "Q", "options": ["a", "b", "c", "d"], "correctAnswer": "d"}
    )

    assert question.correct_answer == "d"
    assert question.model_dump(by_alias=True)["correctAnswer"] == "d"


def test_test_assigns_missing_question_ids_and_keeps_given_ones():
    options = ["a", "b", "c", "d"]
    test = Test(
        questions=[
            Question(id="q1", text="Q1", options=options, correct_answer="a"),
            Question(text="Q2", options=options, correct_answer="b"),
        ]
    )

    assert test.questions[0].id == "q1"
    assert test.questions[1].id


def test_test_rejects_duplicate_question_ids():
    options = ["a", "b", "c", "d"]
    with pytest.raises(PydanticValidationError):
        Test(
            questions=[
                Question(id="q1", text="Q1", options=options, correct_answer="a"),
                Question(id="q1", text="Q2", options=options, correct_answer="b"),
            ]
        )


def test_test_spec_requires_positive_question_count():
    with pytest.raises(PydanticValidationError):
        TestSpec(title="t", num_questions=0, difficulty="easy")


def test_analysis_result_enforces_score_invariant():
    with pytest.raises(PydanticValidationError):
        AnalysisResult.model_validate(
            {
                "score": 90,
                "correctAnswers": 1,
                "wrongAnswers": 1,
                "questionResults": [{"isCorrect": True}, {"isCorrect": False}],
            }
        )


def test_validate_questions_reports_each_bad_item():
    payload = [
        {"text": "Q", "options": ["a", "b", "c", "d"], "correctAnswer": "a"},
        "not an object",
        {"text": "Q", "options": ["a", "b"], "correctAnswer": "a"},
    ]

    with pytest.raises(ValidationError) as excinfo:
        validate_questions(payload)

    message = str(excinfo.value)
    assert "Question 2" in message
    assert "Question 3" in message
    assert "Question 1" not in message


def test_validate_analysis_requires_object():
    with pytest.raises(ValidationError):
        validate_analysis([], Test())


def test_user_card_loading_state():
    card = build_user_card(None)

    assert card.loading is True
    assert card.title == "Loading ..."
    assert card.lines == []


def test_user_card_shows_profile_details():
    card = build_user_card(UserProfile(name="Ada", email="ada@example.com", role="admin"))

    assert card.loading is False
    assert card.title == "Ada's Dashboard"
    assert card.lines == ["Ada", "ada@example.com", "admin"]


def test_team_roster_is_static():
    assert [member.name for member in TEAM] == ["Sameer Sahu"]

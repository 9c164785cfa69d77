import pytest
from e2c.schemas.judge import (
    JudgeStatus,
    SubmissionResult,
    ValidationOutcome,
    ValidationReport,
)


@pytest.mark.parametrize(
    "status_id, expected",
    [
        (1, JudgeStatus.queued),
        (2, JudgeStatus.processing),
        (3, JudgeStatus.accepted),
        (4, JudgeStatus.wrong_answer),
        (5, JudgeStatus.time_limit_exceeded),
        (6, JudgeStatus.compile_error),
        (7, JudgeStatus.runtime_error),
        (11, JudgeStatus.runtime_error),
        (12, JudgeStatus.runtime_error),
        (13, JudgeStatus.other),
        (None, JudgeStatus.other),
    ],
)
def test_status_from_id(status_id, expected):
    assert JudgeStatus.from_id(status_id) is expected


def test_only_queued_and_processing_are_non_terminal():
    non_terminal = {s for s in JudgeStatus if not s.is_terminal}
    assert non_terminal == {JudgeStatus.queued, JudgeStatus.processing}


def test_result_from_judge_payload():
    result = SubmissionResult.from_judge(
        {
            "token": "abc",
            "status": {"id": 4, "description": "Wrong Answer"},
            "stdout": "5\n",
            "stderr": None,
            "time": 0.012,
            "memory": 3100,
        }
    )

    assert result.token == "abc"
    assert result.status is JudgeStatus.wrong_answer
    assert result.status_description == "Wrong Answer"
    assert result.time == "0.012"
    assert result.is_terminal


def test_result_from_judge_accepts_flat_status_id():
    result = SubmissionResult.from_judge({"token": "abc", "status_id": 2})
    assert result.status is JudgeStatus.processing
    assert not result.is_terminal


def test_report_first_failure_follows_declaration_order():
    report = ValidationReport(
        outcomes=[
            ValidationOutcome(language="PYTHON", passed=True),
            ValidationOutcome(
                language="JAVA",
                passed=False,
                failed_testcase=4,
                result=SubmissionResult(token="t", status_id=5),
            ),
            ValidationOutcome(language="CPP", passed=False, failed_testcase=1),
        ]
    )

    assert not report.passed
    assert report.first_failure.language == "JAVA"
    assert report.first_failure.failure_status is JudgeStatus.time_limit_exceeded


def test_empty_report_passes():
    report = ValidationReport()
    assert report.passed
    assert report.first_failure is None


def test_status_values_are_reported_names():
    assert JudgeStatus.wrong_answer.value == "WrongAnswer"
    assert JudgeStatus.time_limit_exceeded.value == "TimeLimitExceeded"
    assert JudgeStatus.from_id(6).value == "CompileError"

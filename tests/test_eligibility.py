from coursehub.schemas.schemas import CourseRequirements
from coursehub.services.eligibility_service import evaluate, normalize_subjects


def test_minimum_grade_boundary() -> None:
    requirements = {"minimum_grade": 70}

    assert evaluate(requirements, {"final_grade": "65"}).eligible is False
    assert evaluate(requirements, {"final_grade": "70"}).eligible is True
    assert evaluate(requirements, {"final_grade": 85.5}).eligible is True


def test_unparsable_grade_is_ineligible_not_an_error() -> None:
    requirements = {"minimum_grade": 70}

    for grade in ("abc", "", None, "nan", "inf", True, ["70"], 10 ** 400):
        result = evaluate(requirements, {"final_grade": grade})
        assert result.eligible is False
        assert result.reasons


def test_missing_grade_fails_when_required() -> None:
    result = evaluate({"minimum_grade": 50}, {"subjects": ["Math"]})

    assert result.eligible is False
    assert "missing" in result.reasons[0]


def test_camel_case_records_are_understood() -> None:
    assert evaluate({"minimumGrade": 70}, {"finalGrade": "65"}).eligible is False
    assert evaluate({"minimumGrade": 70}, {"finalGrade": "71"}).eligible is True
    assert evaluate({"requiredSubjects": ["Art"]}, {"subjects": "Fine Art"}).eligible is True
    assert evaluate({"portfolioRequired": True}, {"portfolio": ""}).eligible is False


def test_required_subjects_trimmed_case_insensitive_substring() -> None:
    requirements = CourseRequirements(required_subjects=[" mathematics", "English "])
    qualifications = {"subjects": ["Advanced Mathematics", "ENGLISH", "Biology"]}

    assert evaluate(requirements, qualifications).eligible is True


def test_required_subjects_missing_lists_the_gap() -> None:
    result = evaluate(
        {"required_subjects": "Mathematics, Physics"},
        {"subjects": "Mathematics, Biology"}
    )

    assert result.eligible is False
    assert result.reasons == ["Missing required subjects: physics"]


def test_student_without_subjects_fails_subject_rule() -> None:
    assert evaluate({"required_subjects": ["Math"]}, {}).eligible is False


def test_portfolio_rule() -> None:
    requirements = {"portfolio_required": True}

    assert evaluate(requirements, {}).eligible is False
    assert evaluate(requirements, {"portfolio": "   "}).eligible is False
    assert evaluate(requirements, {"portfolio": "https://portfolio.example/me"}).eligible is True
    assert evaluate({"portfolio_required": False}, {}).eligible is True


def test_absent_requirements_skip_rules() -> None:
    assert evaluate(None, {}).eligible is True
    assert evaluate({}, None).eligible is True
    assert evaluate(CourseRequirements(), {"final_grade": "abc"}).eligible is True


def test_every_failed_rule_reports_a_reason() -> None:
    result = evaluate(
        {"minimum_grade": 80, "required_subjects": ["Chemistry"], "portfolio_required": True},
        {"final_grade": "60", "subjects": ["Math"]}
    )

    assert result.eligible is False
    assert len(result.reasons) == 3


def test_malformed_inputs_never_raise() -> None:
    assert evaluate("garbage", 42).eligible is True
    assert evaluate({"minimum_grade": "seventy"}, {"final_grade": "90"}).eligible is False
    assert evaluate({"required_subjects": ["Math"]}, {"subjects": 12}).eligible is False


def test_normalize_subjects() -> None:
    assert normalize_subjects(" Math , ,English") == ["math", "english"]
    assert normalize_subjects(["  Art "]) == ["art"]
    assert normalize_subjects(None) == []

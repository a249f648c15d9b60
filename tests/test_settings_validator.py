from quizzy.defaults import default_settings
from quizzy.services.settings_validator import SETTINGS_RULES, validate_settings


def valid_settings():
    return default_settings()


def test_default_settings_are_valid():
    assert validate_settings(valid_settings()) == []


def test_boundaries_are_inclusive():
    candidate = valid_settings()
    candidate.update(quizTimeLimit=180, passingScore=0, maxAttempts=10)
    assert validate_settings(candidate) == []

    candidate.update(quizTimeLimit=1, passingScore=100, maxAttempts=1)
    assert validate_settings(candidate) == []


def test_each_single_violation_yields_one_message_naming_the_field():
    violations = {
        "quizTimeLimit": 181,
        "passingScore": -1,
        "allowRetakes": "yes",
        "showResults": 1,
        "maxAttempts": 11,
        "feedbackMode": "sometimes",
        "gradingScheme": "letters",
    }
    for field, bad_value in violations.items():
        candidate = valid_settings()
        candidate[field] = bad_value
        errors = validate_settings(candidate)
        assert len(errors) == 1, f"{field}: {errors}"
        assert field in errors[0]


def test_collects_all_violations():
    candidate = valid_settings()
    candidate.update(quizTimeLimit=500, feedbackMode="bogus")

    errors = validate_settings(candidate)

    assert errors == [
        "quizTimeLimit must be between 1 and 180",
        "feedbackMode must be one of: immediate, afterSubmission, never",
    ]


def test_missing_fields_are_reported_in_rule_order():
    errors = validate_settings({})
    assert errors == [f"{field} is required" for field in SETTINGS_RULES]


def test_wrong_types():
    candidate = valid_settings()
    candidate.update(passingScore="70", maxAttempts=True, gradingScheme=3)

    errors = validate_settings(candidate)

    assert errors == [
        "passingScore must be a number",
        "maxAttempts must be a number",
        "gradingScheme must be a string",
    ]


def test_unrecognized_fields_are_ignored():
    candidate = valid_settings()
    candidate["maxQuestions"] = "lots"
    candidate["analytics"] = None
    assert validate_settings(candidate) == []


def test_non_object_candidate():
    assert validate_settings(["quizTimeLimit"]) == ["Settings must be an object"]

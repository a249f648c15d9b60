import quizzy.services.statistics_service as statistics_module
from quizzy.services.statistics_service import parse_timestamp, statistics_service

DAY_MS = 24 * 60 * 60 * 1000
BASE_TS = 1700000000000  # 2023-11-14T22:13:20Z


def test_average_score():
    assert statistics_service.average_score([{"score": 8}, {"score": 6}]) == 7
    assert statistics_service.average_score([]) == 0


def test_average_score_treats_bad_scores_as_zero():
    results = [{"score": 9}, {"score": "nine"}, {}, "not a record"]
    assert statistics_service.average_score(results) == 3
    assert statistics_service.average_score(None) == 0


def test_completion_rate():
    assert statistics_service.completion_rate([{"completed": True}, {"completed": False}]) == 50
    assert statistics_service.completion_rate([]) == 0
    assert statistics_service.completion_rate([{"completed": "true"}, {}]) == 0


def test_recent_activity_is_newest_first_and_capped():
    results = [
        {"studentName": f"s{i}", "score": i, "timestamp": BASE_TS + i * DAY_MS}
        for i in range(8)
    ]
    results.append({"studentName": "undated", "score": 1})

    activity = statistics_service.recent_activity(results)

    assert [a["user"] for a in activity] == ["s7", "s6", "s5", "s4", "s3"]
    assert activity[0] == {
        "type": "quiz_completion",
        "user": "s7",
        "score": 7,
        "timestamp": BASE_TS + 7 * DAY_MS,
    }


def test_performance_trend_skips_bad_timestamps():
    results = [{"score": i, "timestamp": BASE_TS + i * DAY_MS} for i in range(9)]
    results += [{"score": 100}, {"score": 100, "timestamp": "yesterday"}]

    trend = statistics_service.performance_trend(results)

    assert not trend.degraded
    assert trend.status == "ok"
    assert len(trend.value) == 7
    assert trend.value[0] == {"date": "2023-11-22", "score": 8}
    assert trend.value[-1] == {"date": "2023-11-16", "score": 2}


def test_performance_trend_accepts_iso_and_numeric_strings():
    results = [
        {"score": 1, "timestamp": "2024-03-01T10:00:00Z"},
        {"score": 2, "timestamp": str(BASE_TS)},
    ]
    trend = statistics_service.performance_trend(results)
    assert trend.value == [
        {"date": "2024-03-01", "score": 1},
        {"date": "2023-11-14", "score": 2},
    ]


def test_performance_trend_failure_is_reported_as_degraded(monkeypatch):
    def broken(value):
        raise RuntimeError("clock exploded")

    monkeypatch.setattr(statistics_module, "parse_timestamp", broken)

    trend = statistics_service.performance_trend([{"score": 1, "timestamp": BASE_TS}])

    assert trend.degraded
    assert trend.status == "degraded"
    assert trend.value == []
    assert "clock exploded" in trend.reason


def test_result_stats_on_empty_input():
    stats = statistics_service.result_stats([])
    assert stats == {
        "totalAttempts": 0,
        "averageScore": 0,
        "highestScore": 0,
        "lowestScore": 0,
        "recentAttempts": [],
        "completionRate": 0,
    }


def test_result_stats():
    results = [{"id": str(i), "score": s, "completed": i % 2 == 0} for i, s in enumerate([4, 9, 1, 7, 5, 6])]

    stats = statistics_service.result_stats(results)

    assert stats["totalAttempts"] == 6
    assert stats["averageScore"] == 5.33
    assert stats["highestScore"] == 9
    assert stats["lowestScore"] == 1
    assert [r["id"] for r in stats["recentAttempts"]] == ["1", "2", "3", "4", "5"]
    assert stats["completionRate"] == 50


def test_question_accuracy_and_timing():
    questions = [{"id": "q1", "text": "2 + 2?"}, {"id": "q2", "text": "Unused"}]
    results = [
        {"answers": [{"questionId": "q1", "correct": True, "timeSpent": 10}]},
        {"answers": [{"questionId": "q1", "correct": False, "timeSpent": 5}]},
        {"answers": [{"questionId": "q1", "correct": False, "timeSpent": 0}]},
        {"answers": [{"questionId": "q1", "isCorrect": True}]},
        {"answers": "garbage"},
    ]

    stats = statistics_service.question_stats(questions, results)

    assert stats[0] == {
        "id": "q1",
        "text": "2 + 2?",
        "totalAttempts": 4,
        "correctAnswers": 2,
        "accuracy": 50,
        "averageTime": 8,
    }
    assert stats[1]["totalAttempts"] == 0
    assert stats[1]["accuracy"] == 0
    assert stats[1]["averageTime"] == 0


def test_question_accuracy_with_two_results():
    questions = [{"id": "q1", "text": "?"}]
    results = [
        {"answers": [{"questionId": "q1", "correct": True}]},
        {"answers": [{"questionId": "q1", "correct": False}]},
    ]
    assert statistics_service.question_stats(questions, results)[0]["accuracy"] == 50


def test_numeric_question_ids_match_string_references():
    questions = [{"id": 1, "text": "?"}]
    results = [{"answers": [{"questionId": "1", "correct": True}]}]
    assert statistics_service.question_stats(questions, results)[0]["correctAnswers"] == 1


def test_dashboard_stats():
    document = {
        "quizzes": [{"id": "a"}, {"id": "b"}],
        "results": [
            {"studentName": "Ann", "score": 4, "completed": True, "timestamp": BASE_TS},
            {"studentName": "Ann", "score": 2, "completed": False, "timestamp": BASE_TS + DAY_MS},
            {"studentName": "Bob", "score": 3, "completed": True, "timestamp": BASE_TS + 2 * DAY_MS},
        ],
    }

    stats = statistics_service.dashboard_stats(document)

    assert stats["totalQuizzes"] == 2
    assert stats["activeUsers"] == 2
    assert stats["averageScore"] == 3
    assert stats["completionRate"] == 66.67
    assert stats["recentActivity"][0]["user"] == "Bob"
    assert len(stats["performanceTrend"]) == 3
    assert stats["performanceTrendStatus"] == "ok"


def test_student_stats():
    document = {
        "settings": {"passingScore": 70},
        "quizzes": [{"id": "hard", "passingScore": 40}],
        "results": [
            {"studentName": "Ann", "score": 3, "totalQuestions": 4, "timestamp": BASE_TS},
            {"studentName": "Ann", "score": 2, "totalQuestions": 4, "quizId": "hard", "timestamp": BASE_TS + DAY_MS},
            {"studentName": "Bob", "score": 4, "totalQuestions": 4, "timestamp": BASE_TS},
        ],
    }

    stats = statistics_service.student_stats(document, "Ann")

    assert stats == {
        "studentName": "Ann",
        "quizzesCompleted": 2,
        "averageScore": 62.5,
        "bestScore": 75,
        "passedQuizzes": 2,
        "lastAttempt": BASE_TS + DAY_MS,
    }


def test_student_stats_for_unknown_student():
    stats = statistics_service.student_stats({"results": []}, "Nobody")
    assert stats["quizzesCompleted"] == 0
    assert stats["averageScore"] == 0
    assert stats["lastAttempt"] is None


def test_parse_timestamp_rejects_junk():
    assert parse_timestamp(None) is None
    assert parse_timestamp(True) is None
    assert parse_timestamp("") is None
    assert parse_timestamp("not a date") is None
    assert parse_timestamp({"ms": 1}) is None

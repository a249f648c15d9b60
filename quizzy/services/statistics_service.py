"""
Statistics aggregation over quiz results and questions
Read-only: nothing here mutates the store document
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 5
RECENT_ATTEMPTS_LIMIT = 5
TREND_LIMIT = 7


@dataclass
class BestEffort:
    """Outcome of a non-critical computation that may have been suppressed"""
    value: Any = field(default_factory=list)
    degraded: bool = False
    reason: Optional[str] = None

    @property
    def status(self) -> str:
        return "degraded" if self.degraded else "ok"


def _number(value: Any) -> Optional[float]:
    """Numeric value or None; booleans and NaN do not count"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def _score(result: Dict[str, Any]) -> float:
    score = _number(result.get("score"))
    return score if score is not None else 0


def _records(items: Any) -> List[Dict[str, Any]]:
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def _answers(result: Dict[str, Any]) -> List[Dict[str, Any]]:
    return _records(result.get("answers"))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a result timestamp

    Accepts epoch milliseconds (number or numeric string) and ISO-8601
    strings. Returns None for anything missing or unparsable.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                return None
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    return None


def _newest_first(results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    def sort_key(result):
        parsed = parse_timestamp(result.get("timestamp"))
        return (parsed is not None, parsed.timestamp() if parsed else 0.0)

    return sorted(results, key=sort_key, reverse=True)


def result_percentage(result: Dict[str, Any]) -> float:
    """Stored percentage, or score / totalQuestions * 100 when absent"""
    stored = _number(result.get("percentage"))
    if stored is not None:
        return stored
    total = _number(result.get("totalQuestions"))
    if not total or total <= 0:
        return 0.0
    return _score(result) / total * 100


class StatisticsService:
    """Derived metrics for dashboards and reports"""

    def average_score(self, results: Any) -> float:
        """Arithmetic mean of score; 0 when there are no results"""
        records = _records(results)
        if not records:
            return 0.0
        return sum(_score(r) for r in records) / len(records)

    def completion_rate(self, results: Any) -> float:
        """Percentage of results flagged completed; 0 when there are no results"""
        records = _records(results)
        if not records:
            return 0.0
        completed = sum(1 for r in records if r.get("completed") is True)
        return completed / len(records) * 100

    def recent_activity(self, results: Any) -> List[Dict[str, Any]]:
        """Five most recent results as quiz_completion activity items"""
        return [
            {
                "type": "quiz_completion",
                "user": r.get("studentName"),
                "score": _score(r),
                "timestamp": r.get("timestamp"),
            }
            for r in _newest_first(_records(results))[:RECENT_ACTIVITY_LIMIT]
        ]

    def performance_trend(self, results: Any) -> BestEffort:
        """
        Most recent scores by calendar date, newest first

        Results without a parseable timestamp are skipped. Any failure
        is suppressed and reported as a degraded outcome with no points.
        """
        try:
            dated = []
            for r in _records(results):
                parsed = parse_timestamp(r.get("timestamp"))
                if parsed is not None:
                    dated.append((parsed, _score(r)))

            dated.sort(key=lambda item: item[0], reverse=True)

            points = [
                {"date": parsed.date().isoformat(), "score": score}
                for parsed, score in dated[:TREND_LIMIT]
            ]
            return BestEffort(value=points)
        except Exception as e:
            logger.warning(f"Performance trend computation failed: {str(e)}", exc_info=True)
            return BestEffort(value=[], degraded=True, reason=str(e))

    def result_stats(self, results: Any) -> Dict[str, Any]:
        """Totals, extremes, and the last few attempts in insertion order"""
        records = _records(results)
        scores = [_score(r) for r in records]

        return {
            "totalAttempts": len(records),
            "averageScore": round(self.average_score(records), 2),
            "highestScore": max(scores) if scores else 0,
            "lowestScore": min(scores) if scores else 0,
            "recentAttempts": records[-RECENT_ATTEMPTS_LIMIT:],
            "completionRate": round(self.completion_rate(records), 2),
        }

    def question_stats(self, questions: Any, results: Any) -> List[Dict[str, Any]]:
        """
        Accuracy and average response time per question

        An attempt is a result whose answers reference the question.
        Average time only counts positive timeSpent samples.
        """
        records = _records(results)
        stats = []

        for question in _records(questions):
            question_id = question.get("id")
            if question_id is None:
                continue
            key = str(question_id)

            attempts = 0
            correct = 0
            times = []

            for result in records:
                matching = [a for a in _answers(result) if str(a.get("questionId")) == key]
                if not matching:
                    continue

                attempts += 1
                if any(a.get("correct") is True or a.get("isCorrect") is True for a in matching):
                    correct += 1

                for answer in matching:
                    spent = _number(answer.get("timeSpent"))
                    if spent is not None and spent > 0:
                        times.append(spent)

            stats.append({
                "id": key,
                "text": str(question.get("text") or ""),
                "totalAttempts": attempts,
                "correctAnswers": correct,
                "accuracy": round(correct / attempts * 100, 2) if attempts else 0,
                "averageTime": _round_half_up(sum(times) / len(times)) if times else 0,
            })

        return stats

    def dashboard_stats(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Admin dashboard summary"""
        results = _records(document.get("results"))
        trend = self.performance_trend(results)

        students = {
            r.get("studentName") for r in results
            if isinstance(r.get("studentName"), str) and r.get("studentName")
        }

        return {
            "totalQuizzes": len(_records(document.get("quizzes"))),
            "activeUsers": len(students),
            "averageScore": round(self.average_score(results), 2),
            "completionRate": round(self.completion_rate(results), 2),
            "recentActivity": self.recent_activity(results),
            "performanceTrend": trend.value,
            "performanceTrendStatus": trend.status,
        }

    def passing_score_for(self, document: Dict[str, Any], result: Dict[str, Any]) -> float:
        """Passing threshold of the result's quiz, falling back to settings"""
        quiz_id = result.get("quizId")
        if quiz_id is not None:
            for quiz in _records(document.get("quizzes")):
                if str(quiz.get("id")) == str(quiz_id):
                    threshold = _number(quiz.get("passingScore"))
                    if threshold is not None:
                        return threshold
                    break

        threshold = _number((document.get("settings") or {}).get("passingScore"))
        return threshold if threshold is not None else 0

    def student_results(self, document: Dict[str, Any], student_name: str) -> List[Dict[str, Any]]:
        return [
            r for r in _records(document.get("results"))
            if r.get("studentName") == student_name
        ]

    def student_stats(self, document: Dict[str, Any], student_name: str) -> Dict[str, Any]:
        """Per-student summary; zeros for a student with no results"""
        results = self.student_results(document, student_name)
        percentages = [result_percentage(r) for r in results]
        newest = _newest_first(results)

        return {
            "studentName": student_name,
            "quizzesCompleted": sum(1 for r in results if r.get("completed") is not False),
            "averageScore": round(sum(percentages) / len(percentages), 2) if percentages else 0,
            "bestScore": round(max(percentages), 2) if percentages else 0,
            "passedQuizzes": sum(
                1 for r in results
                if result_percentage(r) >= self.passing_score_for(document, r)
            ),
            "lastAttempt": newest[0].get("timestamp") if newest else None,
        }


# Global instance
statistics_service = StatisticsService()

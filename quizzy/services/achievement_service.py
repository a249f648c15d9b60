"""
Achievement evaluation and awarding
"""
import logging
from typing import Any, Dict, List

from quizzy.services.statistics_service import result_percentage, statistics_service

logger = logging.getLogger(__name__)


class AchievementService:
    """
    Evaluates achievement conditions against a student's results

    Supported conditions (all present conditions must hold):
    - quizzes_completed: number of completed results
    - score_percent: best single result percentage
    - passed_quizzes: results at or above the passing score
    - min_average: mean percentage, optionally gated by min_quizzes
    - time_remaining_percent: time left as a share of the quiz time limit
    """

    KNOWN_CONDITIONS = {
        "quizzes_completed",
        "score_percent",
        "passed_quizzes",
        "min_average",
        "min_quizzes",
        "time_remaining_percent",
    }

    def evaluate(
        self,
        achievement: Dict[str, Any],
        document: Dict[str, Any],
        results: List[Dict[str, Any]],
    ) -> bool:
        """
        Check whether a student's results satisfy an achievement

        Args:
            achievement: Achievement record
            document: Store document (for passing scores and time limits)
            results: The student's results

        Returns:
            True if the achievement is active and every condition holds
        """
        if achievement.get("isActive") is False:
            return False

        conditions = achievement.get("conditions")
        if not isinstance(conditions, dict) or not conditions:
            return False

        unknown = set(conditions) - self.KNOWN_CONDITIONS
        if unknown:
            logger.debug(f"Achievement {achievement.get('id')} has unsupported conditions: {sorted(unknown)}")
            return False

        percentages = [result_percentage(r) for r in results]

        try:
            if "quizzes_completed" in conditions:
                completed = sum(1 for r in results if r.get("completed") is not False)
                if completed < float(conditions["quizzes_completed"]):
                    return False

            if "score_percent" in conditions:
                if not percentages or max(percentages) < float(conditions["score_percent"]):
                    return False

            if "passed_quizzes" in conditions:
                passed = sum(
                    1 for r in results
                    if result_percentage(r) >= statistics_service.passing_score_for(document, r)
                )
                if passed < float(conditions["passed_quizzes"]):
                    return False

            if "min_average" in conditions:
                required_quizzes = float(conditions.get("min_quizzes", 1))
                if len(results) < max(required_quizzes, 1):
                    return False
                if sum(percentages) / len(percentages) < float(conditions["min_average"]):
                    return False
            elif "min_quizzes" in conditions:
                if len(results) < float(conditions["min_quizzes"]):
                    return False

            if "time_remaining_percent" in conditions:
                if not self._any_fast_finish(document, results, float(conditions["time_remaining_percent"])):
                    return False
        except (TypeError, ValueError):
            logger.warning(f"Achievement {achievement.get('id')} has non-numeric conditions")
            return False

        return True

    def _any_fast_finish(self, document: Dict[str, Any], results: List[Dict[str, Any]], threshold: float) -> bool:
        for result in results:
            remaining = result.get("timeRemaining")
            limit_seconds = self._time_limit_seconds(document, result)
            if isinstance(remaining, bool) or not isinstance(remaining, (int, float)) or limit_seconds <= 0:
                continue
            if remaining / limit_seconds * 100 >= threshold:
                return True
        return False

    def _time_limit_seconds(self, document: Dict[str, Any], result: Dict[str, Any]) -> float:
        minutes = None
        quiz_id = result.get("quizId")
        if quiz_id is not None:
            for quiz in document.get("quizzes", []):
                if isinstance(quiz, dict) and str(quiz.get("id")) == str(quiz_id):
                    minutes = quiz.get("timeLimit")
                    break
        if minutes is None:
            minutes = document.get("settings", {}).get("quizTimeLimit")
        if isinstance(minutes, bool) or not isinstance(minutes, (int, float)):
            return 0
        return minutes * 60

    def earned_for(self, document: Dict[str, Any], student_name: str) -> List[Dict[str, Any]]:
        """Achievements the student currently qualifies for"""
        results = statistics_service.student_results(document, student_name)
        return [
            a for a in document.get("achievements", [])
            if isinstance(a, dict) and self.evaluate(a, document, results)
        ]

    def award(self, document: Dict[str, Any], student_name: str) -> List[Dict[str, Any]]:
        """
        Record newly earned achievements for a student

        Mutates the document: appends ids to userAchievements and bumps
        earnedCount. Each achievement is awarded at most once per student.

        Returns:
            Achievements earned for the first time
        """
        already = document["userAchievements"].get(student_name)
        if not isinstance(already, list):
            already = document["userAchievements"][student_name] = []
        owned = {str(a) for a in already}

        newly_earned = []
        for achievement in self.earned_for(document, student_name):
            if str(achievement.get("id")) in owned:
                continue
            already.append(achievement.get("id"))
            achievement["earnedCount"] = int(achievement.get("earnedCount") or 0) + 1
            newly_earned.append(achievement)

        if newly_earned:
            logger.info(
                f"Awarded {len(newly_earned)} achievement(s) to {student_name}: "
                f"{', '.join(str(a.get('name')) for a in newly_earned)}"
            )

        return newly_earned


# Global instance
achievement_service = AchievementService()

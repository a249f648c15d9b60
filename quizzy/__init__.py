"""
Quizzy - quiz-taking and quiz-administration REST service
"""
__version__ = "1.0.0"

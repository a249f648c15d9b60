import asyncio


def run(coro):
    return asyncio.run(coro)


def seed(store, **collections):
    """Write collections over the default document and return it"""
    document = run(store.load())
    document.update(collections)
    run(store.save(document))
    return document


def make_result(name="Ann", score=3, total=4, timestamp=1700000000000, **extra):
    payload = {
        "studentName": name,
        "score": score,
        "totalQuestions": total,
        "answers": [{"questionId": "q1", "selectedAnswer": "4", "isCorrect": True, "timeSpent": 12}],
        "timestamp": timestamp,
    }
    payload.update(extra)
    return payload

"""HTTP tests for the quiz endpoints."""

from datetime import timedelta
from uuid import uuid4

import pytest
from fastapi import status

from tests.fakes import FakeCatalogRepository, FakeClock, FakeQuizRepository, add_quiz


@pytest.fixture
def quiz_lesson(catalog: FakeCatalogRepository, quiz_repo: FakeQuizRepository):
    """Lesson with a three-question quiz; correct options 1, 2, 0."""
    lesson = catalog.add_lesson()
    questions = add_quiz(quiz_repo, lesson.id, [1, 2, 0])
    return lesson, questions


class TestGetQuizEndpoint:
    """Tests for GET /v1/lessons/{lesson_id}/quiz."""

    def test_correct_answers_withheld(self, client, quiz_lesson, student_headers):
        lesson, questions = quiz_lesson

        response = client.get(f"/v1/lessons/{lesson.id}/quiz", headers=student_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [q["id"] for q in data["questions"]] == [str(q.id) for q in questions]
        assert all("correct_index" not in q for q in data["questions"])
        assert data["questions"][0]["answer_options"] == ["a", "b", "c", "d"]

    def test_lesson_without_quiz(
        self, client, catalog: FakeCatalogRepository, student_headers
    ):
        lesson = catalog.add_lesson()

        response = client.get(f"/v1/lessons/{lesson.id}/quiz", headers=student_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["details"] == "Lesson has no quiz questions"


class TestSubmitQuizEndpoint:
    """Tests for POST /v1/lessons/{lesson_id}/quiz/attempts."""

    def test_positional_submission(self, client, quiz_lesson, student_headers):
        """Plain indexes are graded in question order."""
        lesson, _ = quiz_lesson

        response = client.post(
            f"/v1/lessons/{lesson.id}/quiz/attempts",
            json={"answers": [1, 2, None]},
            headers=student_headers,
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["score"] == 2
        assert data["total_questions"] == 3
        assert data["pass_threshold"] == 3
        assert data["passed"] is False
        assert data["completion_recorded"] is False
        assert data["results"][2]["submitted_index"] is None

    def test_keyed_submission_passes(self, client, quiz_lesson, student_headers):
        """Answers keyed by question id pass and complete the lesson."""
        lesson, questions = quiz_lesson
        keyed = [
            {"question_id": str(q.id), "answer_index": q.correct_index}
            for q in reversed(questions)
        ]

        response = client.post(
            f"/v1/lessons/{lesson.id}/quiz/attempts",
            json={"answers": keyed},
            headers=student_headers,
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["passed"] is True
        assert response.json()["completion_recorded"] is True

        progress = client.get(f"/v1/progress/lessons/{lesson.id}", headers=student_headers)
        assert progress.json() == {"completed": True}

    def test_too_many_answers(self, client, quiz_lesson, student_headers):
        lesson, _ = quiz_lesson

        response = client.post(
            f"/v1/lessons/{lesson.id}/quiz/attempts",
            json={"answers": [0, 0, 0, 0]},
            headers=student_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_mixed_keyed_and_positional_rejected(self, client, quiz_lesson, student_headers):
        """A keyed answer mixed with positional ones records nothing."""
        lesson, questions = quiz_lesson
        answers = [
            {"question_id": str(questions[1].id), "answer_index": questions[1].correct_index},
            questions[0].correct_index,
        ]

        response = client.post(
            f"/v1/lessons/{lesson.id}/quiz/attempts",
            json={"answers": answers},
            headers=student_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        history = client.get(f"/v1/lessons/{lesson.id}/quiz/attempts", headers=student_headers)
        assert history.json()["total"] == 0

    def test_unknown_lesson(self, client, student_headers):
        response = client.post(
            f"/v1/lessons/{uuid4()}/quiz/attempts",
            json={"answers": [0]},
            headers=student_headers,
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_requires_authentication(self, client, quiz_lesson):
        lesson, _ = quiz_lesson

        response = client.post(
            f"/v1/lessons/{lesson.id}/quiz/attempts", json={"answers": [1, 2, 0]}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestCompletionAndHistoryEndpoints:
    """Tests for the recent-completion and attempt history routes."""

    def test_recent_completion_window(
        self, client, quiz_lesson, clock: FakeClock, student_headers
    ):
        lesson, _ = quiz_lesson
        client.post(
            f"/v1/lessons/{lesson.id}/quiz/attempts",
            json={"answers": [1, 2, 0]},
            headers=student_headers,
        )
        url = f"/v1/lessons/{lesson.id}/quiz/completion"

        response = client.get(url, headers=student_headers)
        assert response.json()["recently_completed"] is True
        assert response.json()["last_passed_at"] is not None

        clock.advance(timedelta(hours=25))
        response = client.get(url, headers=student_headers)
        assert response.json() == {"recently_completed": False, "last_passed_at": None}

    def test_attempt_history(self, client, quiz_lesson, clock: FakeClock, student_headers):
        lesson, _ = quiz_lesson
        url = f"/v1/lessons/{lesson.id}/quiz/attempts"
        client.post(url, json={"answers": [0, 0, 0]}, headers=student_headers)
        clock.advance(timedelta(minutes=1))
        client.post(url, json={"answers": [1, 2, 0]}, headers=student_headers)

        response = client.get(url, headers=student_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 2
        assert [item["passed"] for item in data["items"]] == [True, False]

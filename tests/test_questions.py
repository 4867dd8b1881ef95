"""
Tests for the Questions API.
============================

POST/GET/DELETE under /api/queues/{queueId}/questions, including the answering
and answered transitions and who may perform them.
"""

import pytest


FEEDBACK = {
    "preparedness": "well",
    "comments": "Nice Good Job A+",
}


class TestCreateQuestion:
    """POST /api/queues/:queueId/questions"""

    def test_succeeds_with_well_formed_request(self, client):
        question = {"name": "a", "location": "b", "topic": "c"}
        res = client.post("/api/queues/1/questions", json=question)
        assert res.status_code == 201
        body = res.json()
        assert body["name"] == "a"
        assert body["location"] == "b"
        assert body["topic"] == "c"
        assert body["queueId"] == 1
        assert body["askedById"] == 1
        assert body["beingAnswered"] is False
        assert body["dequeueTime"] is None

    @pytest.mark.parametrize("missing", ["name", "location", "topic"])
    def test_fails_if_field_missing(self, client, missing):
        question = {"name": "a", "location": "b", "topic": "c"}
        del question[missing]
        res = client.post("/api/queues/1/questions", json=question)
        assert res.status_code == 422

    def test_fails_if_field_blank(self, client):
        question = {"name": "   ", "location": "b", "topic": "c"}
        res = client.post("/api/queues/1/questions", json=question)
        assert res.status_code == 422

    def test_fails_if_queue_does_not_exist(self, client):
        question = {"name": "a", "location": "b", "topic": "c"}
        res = client.post("/api/queues/50/questions", json=question)
        assert res.status_code == 404

    def test_succeeds_for_student(self, client):
        question = {"name": "a", "location": "b", "topic": "c"}
        res = client.post("/api/queues/2/questions?forceuser=student", json=question)
        assert res.status_code == 201
        assert res.json()["askedById"] == 4

    def test_fails_if_student_already_has_question_on_queue(self, client):
        question = {"name": "a", "location": "b", "topic": "c"}
        res = client.post("/api/queues/1/questions?forceuser=student", json=question)
        assert res.status_code == 422

    def test_new_question_goes_to_back_of_queue(self, client):
        question = {"name": "a", "location": "b", "topic": "c"}
        client.post("/api/queues/1/questions", json=question)
        res = client.get("/api/queues/1/questions")
        assert [q["id"] for q in res.json()] == [1, 2, 3]


class TestListQuestions:
    """GET /api/queues/:queueId/questions"""

    def test_succeeds_with_valid_response(self, client):
        res = client.get("/api/queues/1/questions")
        assert res.status_code == 200
        body = res.json()
        assert len(body) == 2
        # Ensure the questions are ordered correctly
        assert body[0]["id"] == 1
        assert body[1]["id"] == 2

    def test_fails_if_queue_does_not_exist(self, client):
        res = client.get("/api/queues/50/questions")
        assert res.status_code == 404

    def test_succeeds_with_valid_response_for_non_admin(self, client):
        res = client.get("/api/queues/1/questions?forceuser=student")
        assert res.status_code == 200
        body = res.json()
        assert len(body) == 2
        assert body[0]["id"] == 1
        assert body[1]["id"] == 2

    def test_empty_queue(self, client):
        res = client.get("/api/queues/2/questions")
        assert res.status_code == 200
        assert res.json() == []

    def test_answered_questions_leave_the_queue(self, client):
        client.post("/api/queues/1/questions/1/answered", json=FEEDBACK)
        res = client.get("/api/queues/1/questions")
        assert [q["id"] for q in res.json()] == [2]


class TestGetQuestion:
    """GET /api/queues/:queueId/questions/:questionId"""

    def test_should_succeed_for_admin(self, client):
        res = client.get("/api/queues/1/questions/1")
        assert res.status_code == 200
        body = res.json()
        assert body["name"] == "Nathan"
        assert body["location"] == "Siebel"
        assert body["topic"] == "Queue"
        assert body["id"] == 1

    def test_should_succeed_for_non_admin(self, client):
        res = client.get("/api/queues/1/questions/1?forceuser=student")
        assert res.status_code == 200
        body = res.json()
        assert body["name"] == "Nathan"
        assert body["location"] == "Siebel"
        assert body["topic"] == "Queue"
        assert body["id"] == 1

    def test_fails_if_question_does_not_exist_with_queue(self, client):
        res = client.get("/api/queues/2/questions/1")
        assert res.status_code == 404

    def test_fails_if_question_does_not_exist(self, client):
        res = client.get("/api/queues/1/questions/99")
        assert res.status_code == 404


class TestStartAnswering:
    """POST /api/queues/:queueId/questions/:questionId/answering"""

    def test_succeeds_for_admin(self, client):
        res = client.post("/api/queues/1/questions/1/answering?forceuser=admin")
        assert res.status_code == 200
        body = res.json()
        assert body["beingAnswered"] is True
        assert body["answeredById"] == 1
        assert body["answerStartTime"] is not None

    def test_succeeds_for_course_staff(self, client):
        res = client.post("/api/queues/1/questions/1/answering?forceuser=225staff")
        assert res.status_code == 200
        assert res.json()["beingAnswered"] is True

    def test_fails_for_course_staff_of_other_course(self, client):
        res = client.post("/api/queues/1/questions/1/answering?forceuser=241staff")
        assert res.status_code == 403

    def test_fails_for_student(self, client):
        res = client.post("/api/queues/1/questions/1/answering?forceuser=student")
        assert res.status_code == 403

    def test_fails_if_queue_does_not_exist(self, client):
        res = client.post("/api/queues/50/questions/1/answering?forceuser=admin")
        assert res.status_code == 404

    def test_fails_for_answered_question(self, client):
        client.post("/api/queues/1/questions/1/answered?forceuser=225staff", json=FEEDBACK)
        res = client.post("/api/queues/1/questions/1/answering?forceuser=225staff")
        assert res.status_code == 404
        assert client.get("/api/queues/1/questions/1").json()["beingAnswered"] is False

    def test_fails_for_removed_question(self, client):
        client.delete("/api/queues/1/questions/1?forceuser=student")
        res = client.post("/api/queues/1/questions/1/answering?forceuser=225staff")
        assert res.status_code == 404


class TestStopAnswering:
    """DELETE /api/queues/:queueId/questions/:questionId/answering"""

    def test_succeeds_for_admin(self, client):
        res = client.delete("/api/queues/1/questions/1/answering?forceuser=admin")
        assert res.status_code == 200
        assert res.json()["beingAnswered"] is False

    def test_succeeds_for_course_staff(self, client):
        res = client.delete("/api/queues/1/questions/1/answering?forceuser=225staff")
        assert res.status_code == 200
        assert res.json()["beingAnswered"] is False

    def test_fails_for_student(self, client):
        res = client.delete("/api/queues/1/questions/1/answering?forceuser=student")
        assert res.status_code == 403

    def test_clears_answerer(self, client):
        client.post("/api/queues/1/questions/1/answering?forceuser=225staff")
        res = client.delete("/api/queues/1/questions/1/answering?forceuser=225staff")
        body = res.json()
        assert body["beingAnswered"] is False
        assert body["answeredById"] is None
        assert body["answerStartTime"] is None

    def test_fails_for_answered_question(self, client):
        client.post("/api/queues/1/questions/1/answered?forceuser=225staff", json=FEEDBACK)
        res = client.delete("/api/queues/1/questions/1/answering?forceuser=225staff")
        assert res.status_code == 404
        assert client.get("/api/queues/1/questions/1").json()["answeredById"] == 2


class TestFinishAnswering:
    """POST /api/queues/:queueId/questions/:questionId/answered"""

    def test_succeeds_for_admin(self, client):
        res = client.post("/api/queues/1/questions/1/answered?forceuser=admin", json=FEEDBACK)
        assert res.status_code == 200
        body = res.json()
        assert body["beingAnswered"] is False
        assert body["answeredById"] == 1

    def test_succeeds_for_course_staff(self, client):
        res = client.post("/api/queues/1/questions/1/answered?forceuser=225staff", json=FEEDBACK)
        assert res.status_code == 200
        body = res.json()
        assert body["beingAnswered"] is False
        assert body["answeredById"] == 2

    def test_records_feedback(self, client):
        client.post("/api/queues/1/questions/1/answering?forceuser=225staff")
        res = client.post("/api/queues/1/questions/1/answered?forceuser=225staff", json=FEEDBACK)
        body = res.json()
        assert body["preparedness"] == "well"
        assert body["comments"] == "Nice Good Job A+"
        assert body["answerFinishTime"] is not None
        assert body["dequeueTime"] is not None

    def test_comments_are_optional(self, client):
        res = client.post("/api/queues/1/questions/1/answered", json={"preparedness": "average"})
        assert res.status_code == 200
        assert res.json()["comments"] is None

    def test_fails_for_answered_question(self, client):
        client.post("/api/queues/1/questions/1/answered?forceuser=225staff", json=FEEDBACK)
        res = client.post(
            "/api/queues/1/questions/1/answered?forceuser=admin",
            json={"preparedness": "not", "comments": "overwritten"},
        )
        assert res.status_code == 404
        body = client.get("/api/queues/1/questions/1").json()
        assert body["answeredById"] == 2
        assert body["preparedness"] == "well"
        assert body["comments"] == "Nice Good Job A+"

    def test_fails_for_removed_question(self, client):
        client.delete("/api/queues/1/questions/1?forceuser=student")
        res = client.post("/api/queues/1/questions/1/answered?forceuser=225staff", json=FEEDBACK)
        assert res.status_code == 404
        assert client.get("/api/queues/1/questions/1").json()["answeredById"] is None

    def test_fails_if_preparedness_is_missing(self, client):
        feedback = {"comments": "Nice Good Job A+"}
        res = client.post("/api/queues/1/questions/1/answered", json=feedback)
        assert res.status_code == 422

    def test_fails_if_preparedness_is_unknown(self, client):
        feedback = {"preparedness": "excellent"}
        res = client.post("/api/queues/1/questions/1/answered", json=feedback)
        assert res.status_code == 422

    def test_fails_for_course_staff_of_other_course(self, client):
        res = client.post("/api/queues/1/questions/1/answered?forceuser=241staff")
        assert res.status_code == 403

    def test_fails_for_student(self, client):
        res = client.post("/api/queues/1/questions/1/answered?forceuser=student")
        assert res.status_code == 403


class TestRemoveQuestion:
    """DELETE /api/queues/:queueId/questions/:questionId"""

    def test_succeeds_for_course_staff(self, client):
        res = client.delete("/api/queues/2/questions/1?forceuser=225staff")
        assert res.status_code == 204

    def test_succeeds_for_the_student_that_asked_the_question(self, client):
        res = client.delete("/api/queues/2/questions/1?forceuser=student")
        assert res.status_code == 204

    def test_fails_for_course_staff_of_another_course(self, client):
        res = client.delete("/api/queues/2/questions/1?forceuser=241staff")
        assert res.status_code == 403

    def test_fails_for_random_student(self, client):
        res = client.delete("/api/queues/2/questions/1?forceuser=otherstudent")
        assert res.status_code == 403

    def test_fails_if_question_does_not_exist(self, client):
        res = client.delete("/api/queues/1/questions/99")
        assert res.status_code == 404

    def test_fails_if_queue_does_not_exist(self, client):
        res = client.delete("/api/queues/50/questions/1")
        assert res.status_code == 404

    def test_removed_question_leaves_the_queue(self, client):
        client.delete("/api/queues/1/questions/1?forceuser=student")
        res = client.get("/api/queues/1/questions")
        assert [q["id"] for q in res.json()] == [2]

    def test_student_can_ask_again_after_removing(self, client):
        client.delete("/api/queues/1/questions/1?forceuser=student")
        question = {"name": "a", "location": "b", "topic": "c"}
        res = client.post("/api/queues/1/questions?forceuser=student", json=question)
        assert res.status_code == 201

    def test_fails_for_answered_question(self, client):
        client.post("/api/queues/1/questions/1/answered?forceuser=225staff", json=FEEDBACK)
        res = client.delete("/api/queues/1/questions/1?forceuser=student")
        assert res.status_code == 404

    def test_fails_for_removed_question(self, client):
        client.delete("/api/queues/1/questions/1?forceuser=student")
        res = client.delete("/api/queues/1/questions/1?forceuser=225staff")
        assert res.status_code == 404

    def test_removed_question_is_still_readable(self, client):
        client.delete("/api/queues/1/questions/1?forceuser=student")
        res = client.get("/api/queues/1/questions/1")
        assert res.status_code == 200
        assert res.json()["dequeueTime"] is not None

"""
Tests for the Queues API.
=========================
"""


class TestQueues:
    """/api/queues"""

    def test_lists_queues_with_counts(self, client):
        res = client.get("/api/queues?forceuser=student")
        assert res.status_code == 200
        counts = {queue["id"]: queue["questionCount"] for queue in res.json()}
        assert counts == {1: 2, 2: 0}

    def test_get_queue(self, client):
        res = client.get("/api/queues/1")
        assert res.status_code == 200
        body = res.json()
        assert body["name"] == "CS225 Queue"
        assert body["location"] == "Siebel"
        assert body["courseId"] == 1

    def test_missing_queue(self, client):
        res = client.get("/api/queues/50")
        assert res.status_code == 404

    def test_update_queue(self, client):
        res = client.patch("/api/queues/1?forceuser=225staff", json={"location": "Siebel 0224"})
        assert res.status_code == 200
        body = res.json()
        assert body["location"] == "Siebel 0224"
        assert body["name"] == "CS225 Queue"

    def test_update_fails_for_student(self, client):
        res = client.patch("/api/queues/1?forceuser=student", json={"name": "Mine"})
        assert res.status_code == 403

    def test_delete_queue(self, client):
        res = client.delete("/api/queues/1?forceuser=225staff")
        assert res.status_code == 204

        assert client.get("/api/queues/1").status_code == 404
        assert client.get("/api/queues/1/questions").status_code == 404
        assert [queue["id"] for queue in client.get("/api/queues").json()] == [2]

    def test_delete_fails_for_staff_of_other_course(self, client):
        res = client.delete("/api/queues/1?forceuser=241staff")
        assert res.status_code == 403

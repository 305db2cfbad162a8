import pytest
from fastapi.testclient import TestClient

from todo_api.errors import DatabaseConnectionError
from todo_api.routers.todos import get_repository

BASE = "/api/v1/todos"


def create_todo_payload(title="Test Task", status="pending"):
    payload = {"title": title}
    if status is not None:
        payload["status"] = status
    return payload


def assert_todo_shape(todo: dict):
    assert set(todo) == {"id", "title", "status"}
    assert isinstance(todo["id"], int)
    assert isinstance(todo["title"], str)
    assert isinstance(todo["status"], str)


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/")
        assert res.status_code == 200
        data = res.json()
        assert data["message"] == "Healthy"
        assert data["database"] == "sqlite"


class TestTodosCRUD:
    def test_create_and_get(self, client):
        res = client.post(BASE, json=create_todo_payload(title="buy milk", status="pending"))
        assert res.status_code == 201
        todo = res.json()
        assert_todo_shape(todo)
        assert todo["id"] > 0

        res_get = client.get(f"{BASE}/{todo['id']}")
        assert res_get.status_code == 200
        assert res_get.json() == {"id": todo["id"], "title": "buy milk", "status": "pending"}

    def test_create_defaults_status(self, client):
        res = client.post(BASE, json={"title": "Read book"})
        assert res.status_code == 201
        assert res.json()["status"] == "pending"

    def test_create_ignores_client_id(self, client):
        first = client.post(BASE, json=create_todo_payload(title="first")).json()
        res = client.post(BASE, json={"id": 9999, "title": "sneaky", "status": "pending"})
        assert res.status_code == 201
        assert res.json()["id"] != 9999
        assert res.json()["id"] > first["id"]
        assert client.get(f"{BASE}/9999").status_code == 404

    def test_create_strips_whitespace(self, client):
        res = client.post(BASE, json={"title": "  Walk dog  ", "status": " done "})
        assert res.status_code == 201
        assert res.json()["title"] == "Walk dog"
        assert res.json()["status"] == "done"

    def test_list_in_creation_order(self, client):
        assert client.get(BASE).json() == []
        titles = ["one", "two", "three"]
        for t in titles:
            assert client.post(BASE, json=create_todo_payload(title=t)).status_code == 201

        res = client.get(BASE)
        assert res.status_code == 200
        items = res.json()
        assert [it["title"] for it in items] == titles
        ids = [it["id"] for it in items]
        assert ids == sorted(ids)

    def test_get_not_found(self, client):
        res = client.get(f"{BASE}/999999")
        assert res.status_code == 404
        assert res.json() == {"error": "Todo not found"}

    def test_put_replace_todo(self, client):
        tid = client.post(BASE, json=create_todo_payload(title="Initial", status="pending")).json()["id"]

        res_put = client.put(f"{BASE}/{tid}", json={"title": "Replaced", "status": "done"})
        assert res_put.status_code == 200
        assert res_put.json() == {"id": tid, "title": "Replaced", "status": "done"}

        fetched = client.get(f"{BASE}/{tid}").json()
        assert fetched["title"] == "Replaced"
        assert fetched["status"] == "done"

    def test_put_requires_both_fields(self, client):
        tid = client.post(BASE, json=create_todo_payload(title="Initial", status="doing")).json()["id"]

        res = client.put(f"{BASE}/{tid}", json={"title": "Only title"})
        assert res.status_code == 400
        assert "status" in res.json()["error"]
        assert client.get(f"{BASE}/{tid}").json()["status"] == "doing"

    def test_put_not_found(self, client):
        res = client.put(f"{BASE}/424242", json={"title": "Nope", "status": "done"})
        assert res.status_code == 404
        assert res.json() == {"error": "Todo not found"}

    def test_patch_status_keeps_title(self, client):
        tid = client.post(BASE, json=create_todo_payload(title="Partial")).json()["id"]
        client.patch(f"{BASE}/{tid}/title", json={"title": "Partial renamed"})

        res = client.patch(f"{BASE}/{tid}/status", json={"status": "done"})
        assert res.status_code == 200
        assert res.json() == {"id": tid, "status": "done"}

        fetched = client.get(f"{BASE}/{tid}").json()
        assert fetched == {"id": tid, "title": "Partial renamed", "status": "done"}

    def test_patch_title_keeps_status(self, client):
        tid = client.post(BASE, json=create_todo_payload(title="Old", status="blocked")).json()["id"]

        res = client.patch(f"{BASE}/{tid}/title", json={"title": "New"})
        assert res.status_code == 200
        assert res.json() == {"id": tid, "title": "New"}
        assert client.get(f"{BASE}/{tid}").json()["status"] == "blocked"

    @pytest.mark.parametrize("field", ["status", "title"])
    def test_patch_not_found(self, client, field):
        res = client.patch(f"{BASE}/123456/{field}", json={field: "x"})
        assert res.status_code == 404
        assert res.json() == {"error": "Todo not found"}

    def test_delete_twice(self, client):
        tid = client.post(BASE, json=create_todo_payload(title="ToDelete")).json()["id"]

        res_del = client.delete(f"{BASE}/{tid}")
        assert res_del.status_code == 200
        assert res_del.json() == {"response": "success"}

        assert client.get(f"{BASE}/{tid}").status_code == 404
        res_again = client.delete(f"{BASE}/{tid}")
        assert res_again.status_code == 404
        assert res_again.json() == {"error": "Todo not found"}


class TestValidationErrors:
    def test_create_missing_title_creates_nothing(self, client):
        client.post(BASE, json=create_todo_payload(title="existing"))
        before = len(client.get(BASE).json())

        res = client.post(BASE, json={"status": "pending"})
        assert res.status_code == 400
        assert "title" in res.json()["error"]
        assert len(client.get(BASE).json()) == before

    def test_create_blank_title(self, client):
        res = client.post(BASE, json={"title": "   "})
        assert res.status_code == 400
        assert set(res.json()) == {"error"}

    def test_create_title_too_long(self, client):
        res = client.post(BASE, json={"title": "x" * 201})
        assert res.status_code == 400

    def test_malformed_json_body(self, client):
        res = client.post(
            BASE, content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert res.status_code == 400
        assert "error" in res.json()

    def test_non_integer_id(self, client):
        for method, path in [
            ("GET", f"{BASE}/abc"),
            ("DELETE", f"{BASE}/abc"),
        ]:
            res = client.request(method, path)
            assert res.status_code == 400
            assert "todo_id" in res.json()["error"]

    def test_patch_status_missing_field(self, client):
        tid = client.post(BASE, json=create_todo_payload(title="T")).json()["id"]
        res = client.patch(f"{BASE}/{tid}/status", json={"title": "wrong field"})
        assert res.status_code == 400

    @pytest.mark.parametrize(
        "method, suffix, body",
        [
            ("GET", "", None),
            ("DELETE", "", None),
            ("PUT", "", {"title": "t", "status": "s"}),
            ("PATCH", "/status", {"status": "done"}),
            ("PATCH", "/title", {"title": "t"}),
        ],
    )
    @pytest.mark.parametrize("todo_id", [0, 2**31, 2**63])
    def test_out_of_range_id_is_bad_request(self, client, method, suffix, body, todo_id):
        res = client.request(method, f"{BASE}/{todo_id}{suffix}", json=body)
        assert res.status_code == 400
        assert "todo_id" in res.json()["error"]

    def test_long_status_is_accepted(self, client):
        status = "waiting on the landlord to call back about the boiler repair"
        res = client.post(BASE, json={"title": "Boiler", "status": status})
        assert res.status_code == 201
        assert client.get(f"{BASE}/{res.json()['id']}").json()["status"] == status

    def test_blank_status_is_rejected(self, client):
        res = client.post(BASE, json={"title": "T", "status": "  "})
        assert res.status_code == 400
        assert "status" in res.json()["error"]

    def test_unknown_method_uses_error_body(self, client):
        res = client.post(f"{BASE}/1")
        assert res.status_code == 405
        assert res.json() == {"error": "Method Not Allowed"}


class TestDatabaseErrors:
    def test_query_failure_is_500_not_crash(self, client, database):
        database.execute("DROP TABLE todos")

        res = client.get(BASE)
        assert res.status_code == 500
        assert "todos" in res.json()["error"]

        res_create = client.post(BASE, json=create_todo_payload(title="after drop"))
        assert res_create.status_code == 500

        # the service keeps answering once the table is back
        database.execute(
            "CREATE TABLE todos (id INTEGER PRIMARY KEY AUTOINCREMENT, title TEXT NOT NULL, status TEXT NOT NULL)"
        )
        assert client.get(BASE).status_code == 200

    def test_health_check_reports_unreachable_database(self, client, database, monkeypatch):
        def broken_ping():
            raise DatabaseConnectionError("database is down")

        monkeypatch.setattr(database, "ping", broken_ping)
        res = client.get("/")
        assert res.status_code == 500
        assert res.json() == {"error": "database is down"}


class TestUnexpectedErrors:
    def test_unhandled_error_keeps_json_body(self, app):
        class BrokenRepository:
            def list_all(self):
                raise RuntimeError("unexpected failure")

        app.dependency_overrides[get_repository] = lambda: BrokenRepository()
        with TestClient(app, raise_server_exceptions=False) as c:
            res = c.get(BASE)
        assert res.status_code == 500
        assert res.headers["content-type"].startswith("application/json")
        assert res.json() == {"error": "unexpected failure"}

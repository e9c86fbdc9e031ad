"""HTTP-level tests for routing, the response envelope and error mapping."""

from __future__ import annotations

import threading
import unittest
from unittest import mock

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.dependencies import get_db
from app.llm.openrouter_client import CompletionRequest, CompletionStream, ModelInvocationError
from app.main import app
from app.models.base import Base


class _StubStreamingClient:
    def __init__(self, chunks: list[str], finish_reason: str = "stop") -> None:
        self.chunks = chunks
        self.finish_reason = finish_reason

    def stream(self, request: CompletionRequest, cancel_token: threading.Event | None = None) -> CompletionStream:
        events = [{"choices": [{"delta": {"content": chunk}}]} for chunk in self.chunks]
        events.append({"choices": [{"delta": {}, "finish_reason": self.finish_reason}]})
        return CompletionStream(iter(events), cancel_token=cancel_token)


class ApiRouteTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine(
            "sqlite+pysqlite:///:memory:",
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        SessionLocal = sessionmaker(bind=self.engine, autoflush=False, autocommit=False, future=True)
        Base.metadata.create_all(self.engine)

        def override_get_db():
            db = SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    def _create_book_input(self) -> int:
        response = self.client.post("/book-inputs", json={"label": "hen", "ocr_markdown": "# The Little Red Hen"})
        self.assertEqual(response.status_code, 201)
        return response.json()["data"]["id"]

    def _create_prompt(self) -> int:
        response = self.client.post("/prompts", json={"prompt_text": "Annotate.", "temperature": 0.0})
        self.assertEqual(response.status_code, 201)
        return response.json()["data"]["id"]

    def test_health(self) -> None:
        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_correct_fields_round_trip_and_score(self) -> None:
        book_input_id = self._create_book_input()

        before = self.client.get(f"/book-inputs/{book_input_id}/correct-fields")
        self.assertIsNone(before.json()["data"])

        saved = self.client.put(
            f"/book-inputs/{book_input_id}/correct-fields",
            json={"values": {"title_l1": " The Little Red Hen ", "funding": "empty"}},
        )
        self.assertEqual(saved.status_code, 200)
        values = saved.json()["data"]["values"]
        self.assertEqual(values["title_l1"], "The Little Red Hen")
        self.assertEqual(values["funding"], "empty")
        self.assertIsNone(values["isbn"])

        score = self.client.get(f"/book-inputs/{book_input_id}/score")
        self.assertEqual(score.json()["data"], {"book_input_id": book_input_id, "score": None})

    def test_unknown_field_key_is_rejected(self) -> None:
        book_input_id = self._create_book_input()

        response = self.client.put(
            f"/book-inputs/{book_input_id}/correct-fields",
            json={"values": {"bookTitle": "x"}},
        )

        self.assertEqual(response.status_code, 422)

    def test_missing_records_are_404(self) -> None:
        self.assertEqual(self.client.get("/book-inputs/999").status_code, 404)
        self.assertEqual(self.client.get("/prompts/999").status_code, 404)
        self.assertEqual(self.client.get("/runs/999").status_code, 404)
        self.assertEqual(self.client.get("/field-sets/999").status_code, 404)
        response = self.client.post("/runs", json={"book_input_id": 999, "prompt_id": 999, "model": "m"})
        self.assertEqual(response.status_code, 404)

    def test_parse_endpoint_maps_empty_markdown_to_400(self) -> None:
        bad = self.client.post("/field-sets/parse", json={"markdown": ""})
        self.assertEqual(bad.status_code, 400)
        self.assertEqual(bad.json()["detail"], "Cannot parse empty markdown")

        good = self.client.post("/field-sets/parse", json={"markdown": '<!-- field="isbn" -->123'})
        self.assertEqual(good.status_code, 201)
        self.assertEqual(good.json()["data"]["values"]["isbn"], "123")

    def test_run_execution_and_mark_correct(self) -> None:
        book_input_id = self._create_book_input()
        prompt_id = self._create_prompt()
        stub = _StubStreamingClient(['<!-- field="bookTitle" -->The Little Red Hen'])

        with mock.patch("app.services.runs.get_default_model_client", return_value=stub):
            response = self.client.post(
                "/runs",
                json={"book_input_id": book_input_id, "prompt_id": prompt_id, "model": "m", "invocation_id": "inv-1"},
            )

        self.assertEqual(response.status_code, 200)
        run = response.json()["data"]["run"]
        self.assertEqual(run["finish_reason"], "stop")

        marked = self.client.post(f"/runs/{run['id']}/fields/title_l1/mark-correct")
        self.assertTrue(marked.json()["data"]["updated"])

        fields = self.client.get(f"/runs/{run['id']}/fields").json()["data"]
        title = next(row for row in fields if row["key"] == "title_l1")
        self.assertEqual(title["correctness"], "correct")

        score = self.client.get(f"/book-inputs/{book_input_id}/score")
        self.assertEqual(score.json()["data"]["score"], 100)

        starred = self.client.patch(f"/runs/{run['id']}", json={"starred": True})
        self.assertEqual(starred.json()["data"]["human_tags"], ["star"])

    def test_model_failure_maps_to_502(self) -> None:
        book_input_id = self._create_book_input()
        prompt_id = self._create_prompt()
        stub = _StubStreamingClient(["partial"], finish_reason="length")

        with mock.patch("app.services.runs.get_default_model_client", return_value=stub):
            response = self.client.post("/runs", json={"book_input_id": book_input_id, "prompt_id": prompt_id})

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["detail"], "Ran out of tokens before finishing (max tokens reached)")
        runs = self.client.get("/runs", params={"book_input_id": book_input_id}).json()["data"]
        self.assertEqual(runs[0]["finish_reason"], "length")

    def test_missing_api_key_maps_to_502(self) -> None:
        book_input_id = self._create_book_input()
        prompt_id = self._create_prompt()

        with mock.patch(
            "app.services.runs.get_default_model_client",
            side_effect=ModelInvocationError("OPENROUTER_API_KEY is not configured."),
        ):
            response = self.client.post("/runs", json={"book_input_id": book_input_id, "prompt_id": prompt_id})

        self.assertEqual(response.status_code, 502)

    def test_cancel_unknown_invocation(self) -> None:
        response = self.client.post("/runs/invocations/nothing-running/cancel")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"], {"invocation_id": "nothing-running", "cancelled": False})

    def test_field_definitions(self) -> None:
        rows = self.client.get("/field-sets/definitions").json()["data"]

        self.assertEqual(rows[0], {"key": "title_l1", "markdown_key": "bookTitle", "label": "Title L1"})
        self.assertEqual(len(rows), 22)


if __name__ == "__main__":
    unittest.main()

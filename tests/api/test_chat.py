"""Tests for the chat endpoint."""

import base64
import json

from src.errors.domain import UpstreamUnavailableError


class TestSendMessage:
    def test_turn_returns_reply_and_title(self, client, make_account):
        make_account("u1")

        response = client.post(
            "/api/v1/chat/message", json={"message": "Hello", "user_id": "u1"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["response"] == "Write a one-page plan."
        assert data["title"] == "Getting started"
        assert data["conversation_id"]
        assert data["message_id"]
        assert data["files"] is None

    def test_advisor_down_still_returns_200(self, client, advisor):
        advisor.complete.side_effect = UpstreamUnavailableError("down")

        response = client.post(
            "/api/v1/chat/message", json={"message": "Hello", "user_id": "u1"}
        )

        assert response.status_code == 200
        assert response.json()["response"] == (
            "Sorry, an error occurred while processing your request"
        )

    def test_body_language_selects_fallback_locale(self, client, advisor):
        advisor.complete.side_effect = UpstreamUnavailableError("down")

        response = client.post(
            "/api/v1/chat/message",
            json={"message": "Привет", "user_id": "u1", "language": "ru"},
            headers={"Accept-Language": "en-US"},
        )

        assert response.json()["response"].startswith("Извините")

    def test_missing_fields_is_400_with_code(self, client):
        response = client.post("/api/v1/chat/message", json={"message": "", "user_id": ""})

        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "E-2001"
        assert data["error"] == "message-and-user-id-required"

    def test_missing_fields_localized_by_header(self, client):
        response = client.post(
            "/api/v1/chat/message",
            json={"message": "", "user_id": "u1"},
            headers={"Accept-Language": "ru-RU,ru;q=0.9"},
        )
        assert response.status_code == 400
        assert response.json()["message"] != ""

    def test_table_directive_returns_inline_file(self, client, advisor):
        directive = json.dumps(
            {"output_format": "csv", "table": {"headers": ["A", "B"], "rows": [["1", "2"]]}}
        )
        advisor.complete.return_value = f"Here you go.\n```json\n{directive}\n```"

        response = client.post(
            "/api/v1/chat/message", json={"message": "csv table", "user_id": "u1"}
        )

        files = response.json()["files"]
        assert len(files) == 1
        assert base64.b64decode(files[0]["content_base64"]) == b"A,B\n1,2\n"
        download = client.get(files[0]["download_url"])
        assert download.status_code == 200
        assert download.content == b"A,B\n1,2\n"

    def test_explicit_table_in_request(self, client):
        response = client.post(
            "/api/v1/chat/message",
            json={
                "message": "export",
                "user_id": "u1",
                "output_format": "xlsx",
                "table": {"headers": ["Col"], "rows": [["v"]]},
            },
        )

        files = response.json()["files"]
        assert files[0]["filename"].endswith(".xlsx")

    def test_context_filters_reach_prompt(self, client, advisor):
        client.post(
            "/api/v1/chat/message",
            json={
                "message": "Hi",
                "user_id": "u1",
                "context_filters": {"region": "Lisbon"},
            },
        )
        system_prompt = advisor.complete.await_args.args[0]
        assert "Region: Lisbon." in system_prompt

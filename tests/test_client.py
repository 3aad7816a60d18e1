"""Tests for the local client configuration and API client."""
from unittest.mock import MagicMock, patch

import pytest

from octopulse.client import (
    ClientError,
    ClientState,
    OctoPulseClient,
    complete_setup,
    main,
    refresh_events,
)

from conftest import SUBSCRIPTION


EVENT = {
    "id": "6f1c2b9e-2d2a-4c55-9d7a-1f3e5b8c0a11",
    "type": "star",
    "title": "New Star!",
    "body": "Your repository octocat/hello-world received a new star from @mona.",
    "timestamp": "2024-05-01T12:00:00.000Z",
}


def _api_response(status_code, body):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = body
    return response


class TestClientState:
    def test_missing_file_loads_defaults(self, tmp_path):
        state = ClientState.load(tmp_path / "missing.json")

        assert state == ClientState()
        assert state.is_configured is False
        assert state.events == []

    def test_save_then_load_keeps_everything(self, tmp_path):
        path = tmp_path / "state.json"
        state = ClientState(
            is_configured=True,
            user_id="u-1",
            selected_repo="octocat/hello-world",
            webhook_url="http://localhost:8000/api/webhook/u-1",
            events=[EVENT],
        )

        state.save(path)

        assert ClientState.load(path) == state

    def test_add_event_prepends(self):
        state = ClientState(events=[EVENT])
        newer = dict(EVENT, id="newer")

        state.add_event(newer)

        assert [e["id"] for e in state.events] == ["newer", EVENT["id"]]

    def test_reset_keeps_user_id(self):
        state = ClientState(
            is_configured=True,
            user_id="u-1",
            selected_repo="octocat/hello-world",
            webhook_url="http://x/api/webhook/u-1",
            events=[EVENT],
        )

        state.reset()

        assert state == ClientState(user_id="u-1")


class TestOctoPulseClient:
    @patch("octopulse.client.requests.request")
    def test_complete_setup_fills_state(self, mock_request):
        mock_request.return_value = _api_response(
            200, {"success": True, "data": {"userId": "u-42"}}
        )
        client = OctoPulseClient("http://localhost:8000/")

        state = complete_setup(client, ClientState(), "octocat/hello-world", SUBSCRIPTION)

        assert state.is_configured is True
        assert state.user_id == "u-42"
        assert state.selected_repo == "octocat/hello-world"
        assert state.webhook_url == "http://localhost:8000/api/webhook/u-42"
        method, url = mock_request.call_args.args
        assert (method, url) == ("POST", "http://localhost:8000/api/settings")
        assert mock_request.call_args.kwargs["json"] == {
            "selectedRepo": "octocat/hello-world",
            "subscription": SUBSCRIPTION,
        }

    @patch("octopulse.client.requests.request")
    def test_refresh_events_replaces_cache(self, mock_request):
        mock_request.return_value = _api_response(200, {"success": True, "data": [EVENT]})
        state = ClientState(is_configured=True, user_id="u-1", events=[])

        refresh_events(OctoPulseClient("http://localhost:8000"), state)

        assert state.events == [EVENT]
        assert mock_request.call_args.args[1] == "http://localhost:8000/api/events/u-1"

    @patch("octopulse.client.requests.request")
    def test_error_envelope_raises_with_status(self, mock_request):
        mock_request.return_value = _api_response(
            401, {"success": False, "error": "Failed to fetch repositories from GitHub."}
        )

        with pytest.raises(ClientError) as excinfo:
            OctoPulseClient("http://localhost:8000").list_repositories("bad")

        assert excinfo.value.status_code == 401
        assert "Failed to fetch repositories" in str(excinfo.value)


def test_client_talks_to_real_app(client, tmp_path):
    """The CLI client speaks the server's envelope format end to end."""

    def forward(method, url, timeout=None, **kwargs):
        return client.request(method, url.replace("http://testserver", ""), **kwargs)

    with patch("octopulse.client.requests.request", side_effect=forward):
        api = OctoPulseClient("http://testserver")
        state = complete_setup(api, ClientState(), "octocat/hello-world", SUBSCRIPTION)
        client.post(
            f"/api/webhook/{state.user_id}",
            json={"action": "created", "sender": {"login": "hubot"}},
            headers={"X-GitHub-Event": "follow"},
        )
        refresh_events(api, state)

    assert state.events[0]["title"] == "New Follower!"


@patch("octopulse.client.requests.request")
def test_cli_reset_writes_state(mock_request, tmp_path):
    path = tmp_path / "state.json"
    ClientState(is_configured=True, user_id="u-1", selected_repo="a/b").save(path)

    assert main(["--state", str(path), "reset"]) == 0

    assert ClientState.load(path) == ClientState(user_id="u-1")
    mock_request.assert_not_called()


def test_cli_events_requires_setup(tmp_path):
    assert main(["--state", str(tmp_path / "state.json"), "events"]) == 1


@pytest.mark.parametrize("contents", [None, "{not json"])
@patch("octopulse.client.requests.request")
def test_cli_setup_reports_unreadable_subscription(mock_request, contents, tmp_path, caplog):
    subscription_path = tmp_path / "subscription.json"
    if contents is not None:
        subscription_path.write_text(contents)
    state_path = tmp_path / "state.json"

    code = main(
        [
            "--state", str(state_path),
            "setup", "--repo", "octocat/hello-world",
            "--subscription", str(subscription_path),
        ]
    )

    assert code == 1
    assert "Could not read subscription file" in caplog.text
    assert not state_path.exists()
    mock_request.assert_not_called()

"""Tests for the GraphQL desired-state adapter."""

from unittest.mock import Mock

import pytest
import requests

from gitpartsync.adapters.graphql import GraphQLClient, GraphQLDesiredStateAdapter, parse_desired_state
from gitpartsync.core.domain.entities import GitTarget
from gitpartsync.core.exceptions import ConfigurationError, FetchError
from gitpartsync.core.ports.config_provider import GraphQLConfig


URL = "https://qontract.example.com/graphql"


def _response(status=200, payload=None, text=None):
    response = Mock()
    response.status_code = status
    response.ok = status < 400
    response.text = text if text is not None else str(payload)
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


def _sync(src=("A", "repo", "main"), dest=("X", "mirror", "master")):
    return {
        "gitlabSync": {
            "sourceProject": dict(zip(("group", "name", "branch"), src)),
            "destinationProject": dict(zip(("group", "name", "branch"), dest)),
        }
    }


@pytest.fixture
def session():
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def client(session, sleeps):
    return GraphQLClient(URL, "dev", "dev", session=session, sleep=sleeps.append)


class TestGraphQLClient:
    """Tests for GraphQLClient."""

    def test_query_returns_data(self, client, session):
        session.post.return_value = _response(payload={"data": {"apps_v1": []}})

        assert client.query("{ apps_v1 { name } }") == {"apps_v1": []}

        _, kwargs = session.post.call_args
        assert kwargs["json"] == {"query": "{ apps_v1 { name } }"}
        assert kwargs["timeout"] == 30.0
        assert session.auth == ("dev", "dev")

    def test_bundle_url(self, client, session):
        session.post.return_value = _response(payload={"data": {}})

        client.query("q", bundle_sha="abc123")

        assert session.post.call_args[0][0] == "https://qontract.example.com/graphqlsha/abc123"
        assert client.bundle_url() == URL

    def test_retry_ladder(self, client, session, sleeps):
        session.post.side_effect = [
            requests.exceptions.ConnectionError("refused"),
            _response(503, text="unavailable"),
            requests.exceptions.Timeout("slow"),
            _response(payload={"data": {"ok": True}}),
        ]

        assert client.query("q") == {"ok": True}
        assert sleeps == [1.0, 3.0, 10.0]

    def test_gives_up_after_ladder(self, client, session, sleeps):
        session.post.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(FetchError, match="4 attempt"):
            client.query("q")

        assert session.post.call_count == 4
        assert sleeps == [1.0, 3.0, 10.0]

    def test_client_error_not_retried(self, client, session, sleeps):
        session.post.return_value = _response(400, text="bad query")

        with pytest.raises(FetchError, match="400"):
            client.query("q")

        assert sleeps == []

    @pytest.mark.parametrize("payload,message", [
        ({"errors": [{"message": "field missing"}]}, "field missing"),
        ({"data": None}, "no data"),
        (["not", "an", "object"], "not an object"),
        (ValueError("bad json"), "not JSON"),
    ])
    def test_bad_documents(self, client, session, payload, message):
        session.post.return_value = _response(payload=payload)

        with pytest.raises(FetchError, match=message):
            client.query("q")


class TestParseDesiredState:

    def test_flattens_sync_targets(self):
        data = {
            "apps_v1": [
                {"codeComponents": [_sync(), {"gitlabSync": None}]},
                {"codeComponents": None},
                {"codeComponents": [_sync(src=("B", "other", "dev"), dest=("Y", "copy", None))]},
            ]
        }

        state = parse_desired_state(data)

        assert [(t.source, t.destination) for t in state.sync_targets] == [
            (GitTarget("A", "repo", "main"), GitTarget("X", "mirror", "master")),
            (GitTarget("B", "other", "dev"), GitTarget("Y", "copy", "")),
        ]

    def test_saas_files(self):
        data = {
            "apps_v1": [],
            "saas_files": [{
                "name": "producer",
                "resourceTemplates": [{"name": "tpl", "targets": [{"ref": "abc"}, {"ref": "def"}]}],
            }],
        }

        state = parse_desired_state(data)

        template = state.saas_files["producer"][0]
        assert template.name == "tpl"
        assert template.target_refs == ("abc", "def")

    @pytest.mark.parametrize("data", [
        {"apps_v1": {"not": "a list"}},
        {"apps_v1": [{"codeComponents": [_sync(src=("A", "repo", ""))]}]},
        {"apps_v1": [{"codeComponents": [_sync(dest=("X", "", "master"))]}]},
        {"apps_v1": [{"codeComponents": [{"gitlabSync": {"sourceProject": None}}]}]},
        {"saas_files": [{"resourceTemplates": []}]},
    ])
    def test_malformed_documents(self, data):
        with pytest.raises(ConfigurationError):
            parse_desired_state(data)


class TestGraphQLDesiredStateAdapter:
    """Tests for GraphQLDesiredStateAdapter."""

    def test_fetch(self, tmp_path):
        query_file = tmp_path / "gitlabSync.graphql"
        query_file.write_text("{ apps_v1 { name } }")
        client = Mock()
        client.query.return_value = {"apps_v1": [{"codeComponents": [_sync()]}]}

        adapter = GraphQLDesiredStateAdapter(GraphQLConfig(server=URL, query_file=query_file), client=client)

        assert len(adapter.fetch_sync_targets()) == 1
        client.query.assert_called_with("{ apps_v1 { name } }", bundle_sha=None)

    def test_fetch_bundle(self):
        client = Mock()
        client.query.return_value = {"apps_v1": []}
        adapter = GraphQLDesiredStateAdapter(GraphQLConfig(server=URL), client=client, query="q")

        adapter.fetch("abc")

        client.query.assert_called_with("q", bundle_sha="abc")

    def test_missing_query_file(self, tmp_path):
        adapter = GraphQLDesiredStateAdapter(
            GraphQLConfig(server=URL, query_file=tmp_path / "missing.graphql"), client=Mock()
        )

        with pytest.raises(ConfigurationError):
            adapter.fetch()

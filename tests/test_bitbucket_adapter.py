from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from pr_notifier.adapters.bitbucket_adapter import BitbucketClient, FetchError, parse_pull_requests
from pr_notifier.utils.helpers import from_unix_millis


def _raw_pr(pr_id=1, is_open=True, reviewers=None):
    return {
        "id": pr_id,
        "title": f"Feature {pr_id}",
        "open": is_open,
        "createdDate": 1_700_000_000_123,
        "updatedDate": 1_700_000_500_000,
        "reviewers": reviewers if reviewers is not None else [
            {"user": {"id": 7, "name": "alice", "displayName": "Alice A", "emailAddress": "a@x"},
             "approved": True},
            {"user": {"id": 8, "name": "bob", "displayName": "Bob B", "emailAddress": "b@x"},
             "approved": False},
        ],
    }


class TestParsePullRequests:
    def test_parses_values(self):
        prs = parse_pull_requests({"size": 2, "values": [_raw_pr(1), _raw_pr(2, is_open=False)]})

        assert [pr.id for pr in prs] == [1, 2]
        first = prs[0]
        assert first.title == "Feature 1"
        assert first.open is True
        assert prs[1].open is False
        assert first.approved_count == 1
        assert [r.name for r in first.reviewers] == ["Alice A", "Bob B"]

    def test_timestamps_are_epoch_millis(self):
        pr = parse_pull_requests({"size": 1, "values": [_raw_pr()]})[0]

        assert pr.created_at == datetime(2023, 11, 14, 22, 13, 20, 123000, tzinfo=timezone.utc)
        assert pr.updated_at == from_unix_millis(1_700_000_500_000)
        assert pr.created_at.tzinfo is not None

    def test_missing_reviewers_defaults_to_empty(self):
        raw = _raw_pr()
        del raw["reviewers"]
        pr = parse_pull_requests({"size": 1, "values": [raw]})[0]

        assert pr.reviewers == []
        assert pr.approved_count == 0

    def test_empty_snapshot(self):
        assert parse_pull_requests({"size": 0, "values": []}) == []

    @pytest.mark.parametrize("payload", [None, [], {"size": 1}, {"values": "nope"}])
    def test_malformed_envelope(self, payload):
        with pytest.raises(FetchError):
            parse_pull_requests(payload)

    def test_missing_field(self):
        raw = _raw_pr()
        del raw["createdDate"]
        with pytest.raises(FetchError):
            parse_pull_requests({"size": 1, "values": [raw]})

    def test_reviewer_without_approved_flag(self):
        raw = _raw_pr(reviewers=[{"user": {"name": "x"}}])
        with pytest.raises(FetchError):
            parse_pull_requests({"size": 1, "values": [raw]})


class TestBitbucketClient:
    def _client(self, response=None, error=None):
        client = BitbucketClient("https://bitbucket.test/prs", "bot", "pw", timeout=12)
        client.session = MagicMock()
        if error is not None:
            client.session.get.side_effect = error
        else:
            client.session.get.return_value = response
        return client

    def test_uses_basic_auth(self):
        client = BitbucketClient("https://bitbucket.test/prs", "bot", "pw")
        assert client.session.auth == ("bot", "pw")

    def test_fetch(self):
        response = MagicMock()
        response.json.return_value = {"size": 1, "values": [_raw_pr(5)]}
        client = self._client(response)

        prs = client.fetch_pull_requests()

        client.session.get.assert_called_once_with("https://bitbucket.test/prs", timeout=12)
        assert [pr.id for pr in prs] == [5]

    def test_network_error(self):
        client = self._client(error=requests.exceptions.ConnectionError("refused"))
        with pytest.raises(FetchError, match="refused"):
            client.fetch_pull_requests()

    def test_http_error_status(self):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("401 Unauthorized")
        client = self._client(response)

        with pytest.raises(FetchError, match="401"):
            client.fetch_pull_requests()

    def test_invalid_json(self):
        response = MagicMock()
        response.json.side_effect = ValueError("Expecting value")
        client = self._client(response)

        with pytest.raises(FetchError):
            client.fetch_pull_requests()


class TestMalformedValues:
    def test_out_of_range_timestamp(self):
        raw = _raw_pr()
        raw["createdDate"] = 10 ** 20
        with pytest.raises(FetchError):
            parse_pull_requests({"size": 1, "values": [raw]})

    def test_out_of_range_updated_timestamp(self):
        raw = _raw_pr()
        raw["updatedDate"] = -(10 ** 20)
        with pytest.raises(FetchError):
            parse_pull_requests({"size": 1, "values": [raw]})

    @pytest.mark.parametrize("value", ["false", "true", 1, 0, None])
    def test_non_boolean_approved_flag(self, value):
        raw = _raw_pr(reviewers=[{"user": {"name": "x"}, "approved": value}])
        with pytest.raises(FetchError, match="approved"):
            parse_pull_requests({"size": 1, "values": [raw]})

    def test_non_boolean_open_flag(self):
        raw = _raw_pr()
        raw["open"] = "false"
        with pytest.raises(FetchError, match="open"):
            parse_pull_requests({"size": 1, "values": [raw]})

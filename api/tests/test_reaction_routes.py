"""
Tests for the reaction HTTP endpoints.

Runs the real application (lifespan, middleware, exception handlers) against
a temporary SQLite store.
"""

from unittest.mock import AsyncMock

import pytest
from event_reactions.core.exceptions import StorageError
from event_reactions.services.sentiment import EMOJI_VOCABULARY

THUMBS_UP = "\U0001f44d"
ANGRY = "\U0001f621"
VOMIT = "\U0001f92e"
UNICORN = "\U0001f984"


def _post(client, **body):
    return client.post("/api/reactions", json=body)


def _assert_error(response, status_code: int, code: str):
    assert response.status_code == status_code
    error = response.json()["error"]
    assert error["code"] == code
    assert error["status_code"] == status_code
    return error


# ---------------------------------------------------------------------------
# POST /api/reactions
# ---------------------------------------------------------------------------


@pytest.mark.integration
class TestSubmitReactionEndpoint:
    def test_positive_reaction(self, test_client):
        response = _post(test_client, reaction=THUMBS_UP, eventId="evt1", userId="u1")

        assert response.status_code == 200
        assert response.json() == {
            "message": "Reaction received",
            "sentimentScores": {"positive": 1, "negative": 0, "neutral": 0},
        }

    def test_scores_accumulate_per_event(self, test_client):
        _post(test_client, reaction=ANGRY, eventId="evt1", userId="u1")
        _post(test_client, reaction=THUMBS_UP, eventId="evt2", userId="u1")
        response = _post(test_client, reaction=VOMIT, eventId="evt1", userId="u2")

        assert response.json()["sentimentScores"] == {
            "positive": 0,
            "negative": 2,
            "neutral": 0,
        }

    def test_missing_fields_return_400(self, test_client):
        response = _post(test_client, reaction=THUMBS_UP)

        error = _assert_error(response, 400, "VALIDATION_ERROR")
        assert error["message"] == "eventId and userId are required"

    def test_empty_body_object_returns_400(self, test_client):
        response = test_client.post("/api/reactions", json={})

        error = _assert_error(response, 400, "VALIDATION_ERROR")
        assert error["message"] == "reaction, eventId and userId are required"

    def test_rejected_submission_is_not_stored(self, test_client):
        _post(test_client, reaction="", eventId="evt1", userId="u1")

        response = test_client.get("/api/reactions/event/evt1")
        assert response.json() == []

    def test_extra_fields_are_ignored(self, test_client):
        response = _post(
            test_client, reaction=THUMBS_UP, eventId="evt1", userId="u1", color="red"
        )

        assert response.status_code == 200

    def test_malformed_json_returns_400(self, test_client):
        response = test_client.post(
            "/api/reactions",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        _assert_error(response, 400, "INVALID_REQUEST")

    def test_non_string_reaction_returns_400(self, test_client):
        response = _post(test_client, reaction=5, eventId="evt1", userId="u1")

        error = _assert_error(response, 400, "INVALID_REQUEST")
        assert "reaction" in error["message"]

    def test_lone_surrogate_returns_400(self, test_client):
        # Valid JSON whose escape decodes to an unpaired UTF-16 surrogate
        response = test_client.post(
            "/api/reactions",
            content=b'{"reaction": "\\ud800", "eventId": "evt1", "userId": "u1"}',
            headers={"Content-Type": "application/json"},
        )

        error = _assert_error(response, 400, "VALIDATION_ERROR_REACTION")
        assert error["message"] == "reaction must be valid UTF-8 text"
        assert test_client.get("/api/reactions/event/evt1").json() == []

    def test_whitespace_reaction_is_stored_as_neutral(self, test_client):
        response = _post(test_client, reaction=" ", eventId="evt1", userId="u1")

        assert response.status_code == 200
        assert response.json()["sentimentScores"]["neutral"] == 1

    def test_storage_failure_returns_500(self, test_client):
        service = test_client.app.state.reaction_service
        service.submit_reaction = AsyncMock(
            side_effect=StorageError("database is locked", operation="write")
        )

        response = _post(test_client, reaction=THUMBS_UP, eventId="evt1", userId="u1")

        _assert_error(response, 500, "STORAGE_WRITE_ERROR")

    def test_unexpected_failure_returns_generic_500(self, test_client):
        service = test_client.app.state.reaction_service
        service.submit_reaction = AsyncMock(side_effect=RuntimeError("boom"))

        response = _post(test_client, reaction=THUMBS_UP, eventId="evt1", userId="u1")

        error = _assert_error(response, 500, "REACTION_SUBMISSION_FAILED")
        assert "boom" not in error["message"]


# ---------------------------------------------------------------------------
# GET /api/sentiment
# ---------------------------------------------------------------------------


@pytest.mark.integration
class TestSentimentEndpoint:
    def test_empty_event(self, test_client):
        response = test_client.get("/api/sentiment", params={"eventId": "evt1"})

        assert response.status_code == 200
        data = response.json()
        assert data["positive"] == data["negative"] == data["neutral"] == 0
        assert list(data["emojiCounts"]) == list(EMOJI_VOCABULARY)
        assert set(data["emojiCounts"].values()) == {0}

    def test_counts_after_submissions(self, test_client):
        _post(test_client, reaction=THUMBS_UP, eventId="evt1", userId="u1")
        _post(test_client, reaction=THUMBS_UP, eventId="evt1", userId="u2")
        _post(test_client, reaction=UNICORN, eventId="evt1", userId="u3")

        data = test_client.get("/api/sentiment", params={"eventId": "evt1"}).json()

        assert (data["positive"], data["negative"], data["neutral"]) == (2, 0, 1)
        assert data["emojiCounts"][THUMBS_UP] == 2
        assert UNICORN not in data["emojiCounts"]

    def test_missing_event_id_returns_400(self, test_client):
        response = test_client.get("/api/sentiment")

        error = _assert_error(response, 400, "VALIDATION_ERROR_EVENTID")
        assert error["message"] == "eventId is required"

    def test_unexpected_failure_returns_500(self, test_client):
        service = test_client.app.state.reaction_service
        service.get_aggregates = AsyncMock(side_effect=RuntimeError("boom"))

        response = test_client.get("/api/sentiment", params={"eventId": "evt1"})

        _assert_error(response, 500, "SENTIMENT_AGGREGATES_FAILED")


# ---------------------------------------------------------------------------
# GET /api/reactions/user/{userId} and /api/reactions/event/{eventId}
# ---------------------------------------------------------------------------


@pytest.mark.integration
class TestListingEndpoints:
    def test_event_listing_shape(self, test_client):
        _post(test_client, reaction=ANGRY, eventId="evt1", userId="u1")

        response = test_client.get("/api/reactions/event/evt1")

        assert response.status_code == 200
        (record,) = response.json()
        assert set(record) == {"id", "reaction", "sentiment", "eventId", "userId", "timestamp"}
        assert record["reaction"] == ANGRY
        assert record["sentiment"] == "negative"
        assert record["eventId"] == "evt1"
        assert record["userId"] == "u1"

    def test_user_listing_newest_first(self, test_client):
        for event_id in ["a", "b", "c"]:
            _post(test_client, reaction=THUMBS_UP, eventId=event_id, userId="u1")
        _post(test_client, reaction=THUMBS_UP, eventId="a", userId="u2")

        records = test_client.get("/api/reactions/user/u1").json()

        assert [r["eventId"] for r in records] == ["c", "b", "a"]

    def test_unknown_ids_return_empty_list(self, test_client):
        assert test_client.get("/api/reactions/user/nobody").json() == []
        assert test_client.get("/api/reactions/event/nothing").json() == []

    def test_listing_failure_returns_500(self, test_client):
        service = test_client.app.state.reaction_service
        service.list_for_event = AsyncMock(side_effect=RuntimeError("boom"))

        response = test_client.get("/api/reactions/event/evt1")

        _assert_error(response, 500, "REACTION_LIST_FAILED")


# ---------------------------------------------------------------------------
# Middleware and profiles
# ---------------------------------------------------------------------------


class TestResponseHeaders:
    def test_responses_are_not_cacheable(self, test_client):
        response = test_client.get("/api/sentiment", params={"eventId": "evt1"})

        assert "no-store" in response.headers["Cache-Control"]
        assert response.headers["Pragma"] == "no-cache"

    def test_error_responses_are_not_cacheable(self, test_client):
        response = test_client.get("/api/sentiment")

        assert response.status_code == 400
        assert "no-store" in response.headers["Cache-Control"]

    def test_health_probes_keep_default_caching(self, test_client):
        response = test_client.get("/health/live")

        assert "Cache-Control" not in response.headers
        assert "Pragma" not in response.headers


class TestUnscopedProfile:
    def test_submit_without_ids(self, unscoped_client):
        response = _post(unscoped_client, reaction=THUMBS_UP)

        assert response.status_code == 200
        assert response.json()["sentimentScores"]["positive"] == 1

    def test_sentiment_without_event_id(self, unscoped_client):
        _post(unscoped_client, reaction=THUMBS_UP, eventId="a", userId="u1")
        _post(unscoped_client, reaction=ANGRY)

        response = unscoped_client.get("/api/sentiment")

        assert response.status_code == 200
        data = response.json()
        assert (data["positive"], data["negative"]) == (1, 1)

    def test_reaction_still_required(self, unscoped_client):
        response = _post(unscoped_client, reaction="")

        _assert_error(response, 400, "VALIDATION_ERROR_REACTION")

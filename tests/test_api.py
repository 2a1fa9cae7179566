"""Tests for the voting and owner HTTP endpoints."""

from uuid import UUID, uuid4

from fastapi.testclient import TestClient

from photo_voting.api.app import create_app
from photo_voting.containers import AppContainer
from tests.conftest import InMemoryStore, make_candidate


def _headers(voter_id: UUID) -> dict[str, str]:
    return {"X-Voter-Id": str(voter_id)}


def test_health(container: AppContainer) -> None:
    with TestClient(create_app(container)) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_voting_requires_identity(container: AppContainer) -> None:
    with TestClient(create_app(container)) as client:
        missing = client.post("/voting/session")
        malformed = client.post("/voting/session", headers={"X-Voter-Id": "nope"})

    assert missing.status_code == 401
    assert malformed.status_code == 401


def test_session_must_be_started(container: AppContainer) -> None:
    with TestClient(create_app(container)) as client:
        response = client.get("/voting/session", headers=_headers(uuid4()))

    assert response.status_code == 404


def test_vote_flow_over_http(container: AppContainer, store: InMemoryStore) -> None:
    voter_id = uuid4()
    first = store.add_photo(make_candidate(total_votes=0))
    second = store.add_photo(make_candidate(total_votes=4))
    headers = _headers(voter_id)

    with TestClient(create_app(container)) as client:
        started = client.post("/voting/session", headers=headers).json()
        assert started["current"]["id"] == str(first.id)
        assert started["loading_state"] == "success"

        early = client.post("/voting/session/submit", headers=headers)
        assert early.status_code == 409

        for trait, value in (
            ("confident", 4),
            ("nice_personality", 3),
            ("attractive", 2),
        ):
            response = client.put(
                "/voting/session/traits",
                json={"trait": trait, "value": value},
                headers=headers,
            )
            assert response.status_code == 200
        assert response.json()["ready_to_submit"] is True

        pending = client.post("/voting/session/submit", headers=headers).json()
        assert pending["phase"] == "feedback_pending"

        tagged = client.post("/voting/session/tags/Helpful", headers=headers).json()
        assert tagged["selected_tags"] == ["Helpful"]

        committed = client.post("/voting/session/feedback", headers=headers).json()
        assert committed["outcome"] == "committed"
        assert committed["session"]["current"]["id"] == str(second.id)
        assert committed["session"]["draft"] == {}

        me = client.get("/voters/me", headers=headers).json()

    assert me == {"id": str(voter_id), "credits": 1}
    assert store.photos[first.id].total_votes == 1


def test_invalid_ratings_are_rejected(
    container: AppContainer, store: InMemoryStore
) -> None:
    store.add_photo(make_candidate())
    headers = _headers(uuid4())

    with TestClient(create_app(container)) as client:
        client.post("/voting/session", headers=headers)
        out_of_range = client.put(
            "/voting/session/traits",
            json={"trait": "confident", "value": 9},
            headers=headers,
        )
        boolean = client.put(
            "/voting/session/traits",
            json={"trait": "confident", "value": True},
            headers=headers,
        )
        fractional = client.put(
            "/voting/session/traits",
            json={"trait": "confident", "value": 2.5},
            headers=headers,
        )
        unknown_trait = client.put(
            "/voting/session/traits",
            json={"trait": "charisma", "value": 2},
            headers=headers,
        )
        tag_while_rating = client.post(
            "/voting/session/tags/Helpful", headers=headers
        )

    assert out_of_range.status_code == 422
    assert boolean.status_code == 422
    assert fractional.status_code == 422
    assert unknown_trait.status_code == 422
    assert tag_while_rating.status_code == 409


def test_empty_pool_reports_empty(container: AppContainer) -> None:
    with TestClient(create_app(container)) as client:
        body = client.post("/voting/session", headers=_headers(uuid4())).json()

    assert body["current"] is None
    assert body["empty"] is True


def test_retry_after_load_failure(container: AppContainer, store: InMemoryStore) -> None:
    store.add_photo(make_candidate())
    store.fail_reads = True
    headers = _headers(uuid4())

    with TestClient(create_app(container)) as client:
        failed = client.post("/voting/session", headers=headers).json()
        store.fail_reads = False
        recovered = client.post("/voting/session/retry", headers=headers).json()

    assert failed["loading_state"] == "error"
    assert failed["error"] is not None
    assert recovered["loading_state"] == "success"
    assert recovered["current"] is not None


def test_owner_lists_and_updates_photos(
    container: AppContainer, store: InMemoryStore
) -> None:
    owner_id = uuid4()
    photo = store.add_photo(make_candidate(total_votes=2, owner_id=owner_id))
    store.add_photo(make_candidate())

    with TestClient(create_app(container)) as client:
        mine = client.get("/photos/mine", headers=_headers(owner_id)).json()
        forbidden = client.patch(
            f"/photos/{photo.id}/status",
            json={"status": "Completed"},
            headers=_headers(uuid4()),
        )
        missing = client.patch(
            f"/photos/{uuid4()}/status",
            json={"status": "Completed"},
            headers=_headers(owner_id),
        )
        updated = client.patch(
            f"/photos/{photo.id}/status",
            json={"status": "Completed"},
            headers=_headers(owner_id),
        )

    assert [item["id"] for item in mine["photos"]] == [str(photo.id)]
    assert mine["photos"][0]["averages"]["confident"] == 2
    assert forbidden.status_code == 403
    assert missing.status_code == 404
    assert updated.status_code == 200
    assert updated.json()["status"] == "Completed"

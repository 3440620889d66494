"""
Tests for the token-based remote ritual and the HTTP API
"""

import shutil
import tempfile

import pytest
from fastapi.testclient import TestClient

from wakeritual.api import api as api_module
from wakeritual.config import RitualConfig
from wakeritual.errors import InvalidTokenError, RitualError
from wakeritual.kernel.bloom import Bloom
from wakeritual.ritual.remote import (
    WakeErrorResponse,
    begin_ritual,
    respond_ritual,
    skip_ritual,
)
from wakeritual.ritual.session import SessionOutcome
from wakeritual.ritual.token import WakeSessionToken
from wakeritual.storage.bloom_store import BloomStore


SECRET = "test-secret"
PHRASE = "every movement is awareness"


class TestWakeSessionToken:
    """Tests for signed session tokens."""

    def make_token(self):
        return WakeSessionToken(bloom_ids=["a", "b"], phrase_indices=[0, None])

    def test_sign_and_verify(self):
        token = self.make_token()
        token.increment_attempt()

        restored = WakeSessionToken.verify(token.sign(SECRET), SECRET)

        assert restored == token
        assert restored.current_bloom_id() == "a"
        assert restored.attempts_on_current == 1

    def test_wrong_secret_rejected(self):
        signed = self.make_token().sign(SECRET)
        with pytest.raises(InvalidTokenError):
            WakeSessionToken.verify(signed, "other-secret")

    def test_tampered_payload_rejected(self):
        other = self.make_token()
        other.remembered_count = 99
        payload = other.sign("attacker").split(".")[0]
        signature = self.make_token().sign(SECRET).split(".")[1]

        with pytest.raises(InvalidTokenError):
            WakeSessionToken.verify(f"{payload}.{signature}", SECRET)

    def test_malformed_tokens_rejected(self):
        for bad in ["", "no-dot", "a.b.c", "!!!.???"]:
            with pytest.raises(InvalidTokenError):
                WakeSessionToken.verify(bad, SECRET)

    def test_advance_counts_outcomes(self):
        token = self.make_token()
        token.increment_attempt()
        token.advance(SessionOutcome.NEEDED_HELP)
        token.advance(SessionOutcome.SKIPPED)

        assert token.is_complete()
        assert token.current_bloom_id() is None
        assert token.needed_help_count == 1
        assert token.skipped_count == 1
        assert token.attempts_on_current == 0


class TestRemoteRitual:
    """Tests for begin/respond/skip."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.store = BloomStore(storage_dir=self.temp_dir)
        self.first = Bloom(id="bl-first", title="First", body="first body",
                           wake_phrases=[PHRASE], wake_order=1)
        self.second = Bloom(id="bl-second", title="Second", body="second body", wake_order=2)
        self.store.store(self.first)
        self.store.store(self.second)

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def begin(self):
        return begin_ritual([self.second, self.first], SECRET)

    def test_begin_returns_first_prompt(self):
        response = self.begin()

        assert response.status == "ritual_started"
        assert response.prompt.id == "bl-first"
        assert response.progress.total == 2

    def test_begin_without_blooms(self):
        with pytest.raises(RitualError):
            begin_ritual([], SECRET)

    def test_remembered(self):
        session = self.begin().session

        response = respond_ritual(self.store, "bl-first", PHRASE.upper(), session, SECRET)

        assert response.status == "remembered"
        assert response.match_type == "exact"
        assert response.bloom.body == "first body"
        assert response.next.id == "bl-second"
        assert response.progress.remembered == 1

    def test_hints_then_reveal(self):
        session = self.begin().session

        first = respond_ritual(self.store, "bl-first", "nope", session, SECRET)
        assert first.status == "incorrect"
        assert first.attempt == 1
        assert first.hint == "starts with 'every…'"

        second = respond_ritual(self.store, "bl-first", "nope", first.session, SECRET)
        assert second.attempt == 2
        assert second.hint == "every ▯ ▯ awareness"

        third = respond_ritual(self.store, "bl-first", "nope", second.session, SECRET)
        assert third.status == "revealed"
        assert third.bloom.matched_phrase == PHRASE
        assert third.next.id == "bl-second"

        skipped = skip_ritual(self.store, "bl-second", third.session, SECRET)
        assert skipped.status == "skipped"
        assert skipped.summary.total == 2
        assert skipped.summary.needed_help == 1
        assert skipped.summary.skipped == 1
        assert skipped.next is None

    def test_wrong_bloom_id(self):
        session = self.begin().session

        response = respond_ritual(self.store, "bl-second", "anything", session, SECRET)

        assert isinstance(response, WakeErrorResponse)
        assert response.error == "invalid_bloom_id"
        assert response.expected_id == "bl-first"

    def test_respond_to_bloom_without_phrase(self):
        session = self.begin().session
        session = skip_ritual(self.store, "bl-first", session, SECRET).session

        with pytest.raises(RitualError):
            respond_ritual(self.store, "bl-second", "anything", session, SECRET)

    def test_complete_ritual_rejects_more_steps(self):
        session = self.begin().session
        session = skip_ritual(self.store, "bl-first", session, SECRET).session
        session = skip_ritual(self.store, "bl-second", session, SECRET).session

        with pytest.raises(RitualError):
            skip_ritual(self.store, "bl-second", session, SECRET)


class TestAPI:
    """Tests for the HTTP API."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        api_module.store = BloomStore(storage_dir=self.temp_dir)
        api_module.config = RitualConfig(storage_dir=self.temp_dir, session_secret=SECRET)
        self.client = TestClient(api_module.app)

    def teardown_method(self):
        api_module.store = None
        api_module.config = None
        shutil.rmtree(self.temp_dir)

    def test_health(self):
        response = self.client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_create_and_list_blooms(self):
        response = self.client.post("/blooms", json={
            "title": "Presence",
            "body": "Stay.",
            "resonance": 0.9,
            "wake_phrases": [PHRASE],
        })
        assert response.status_code == 201
        assert response.json()["has_wake_phrase"] is True
        assert "wake_phrases" not in response.json()

        listed = self.client.get("/blooms").json()
        assert [b["title"] for b in listed] == ["Presence"]

    def test_invalid_bloom_rejected(self):
        response = self.client.post("/blooms", json={"title": "Loud", "resonance": 3})
        assert response.status_code == 422

    def test_add_phrase(self):
        bloom_id = self.client.post("/blooms", json={"title": "Quiet"}).json()["id"]

        response = self.client.post(f"/blooms/{bloom_id}/phrases", json={"phrase": "still water"})

        assert response.status_code == 200
        assert response.json()["has_wake_phrase"] is True
        assert self.client.post("/blooms/bl-missing/phrases", json={"phrase": "x"}).status_code == 404

    def test_patch_resequences_bloom(self):
        first = self.client.post("/blooms", json={"title": "First", "wake_order": 1}).json()["id"]
        second = self.client.post("/blooms", json={"title": "Second", "wake_order": 2}).json()["id"]

        response = self.client.patch(f"/blooms/{second}", json={"wake_order": 0})
        assert response.status_code == 200
        assert response.json()["wake_order"] == 0
        assert [b["id"] for b in self.client.get("/blooms").json()] == [second, first]

        cleared = self.client.patch(f"/blooms/{second}", json={"wake_order": None})
        assert cleared.json()["wake_order"] is None

    def test_patch_errors(self):
        bloom_id = self.client.post("/blooms", json={"title": "Quiet"}).json()["id"]

        assert self.client.patch("/blooms/bl-missing", json={"title": "x"}).status_code == 404
        assert self.client.patch(f"/blooms/{bloom_id}", json={}).status_code == 400
        assert self.client.patch(f"/blooms/{bloom_id}", json={"resonance": 2}).status_code == 422

    def test_ritual_round_trip(self):
        bloom_id = self.client.post("/blooms", json={
            "title": "Presence", "body": "Stay.", "wake_phrases": [PHRASE],
        }).json()["id"]

        begin = self.client.post("/ritual/begin", json={"limit": 5, "activate": False}).json()
        assert begin["prompt"]["id"] == bloom_id

        response = self.client.post("/ritual/respond", json={
            "session": begin["session"], "bloom_id": bloom_id, "phrase": PHRASE,
        })

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "remembered"
        assert body["bloom"]["body"] == "Stay."
        assert body["summary"]["remembered"] == 1

    def test_begin_with_empty_store(self):
        response = self.client.post("/ritual/begin", json={})
        assert response.status_code == 409

    def test_bad_token_is_unauthorized(self):
        response = self.client.post("/ritual/skip", json={"session": "bad.token", "bloom_id": "x"})
        assert response.status_code == 401

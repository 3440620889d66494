"""
Tests for the bloom model and the file-backed bloom store
"""

import json
import shutil
import tempfile
from datetime import datetime

import pytest

from wakeritual.kernel.bloom import Bloom
from wakeritual.storage.bloom_store import BloomStore


class TestBloom:
    """Tests for the Bloom data structure."""

    def test_create_bloom(self):
        bloom = Bloom(title="Presence", body="Stay.", resonance=0.8, wake_phrases=["be here"])

        assert bloom.id.startswith("bl-")
        assert bloom.has_wake_phrase
        assert bloom.wake_order is None

    def test_empty_title_rejected(self):
        with pytest.raises(ValueError):
            Bloom(title="   ")

    def test_resonance_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            Bloom(title="Loud", resonance=1.5)
        with pytest.raises(ValueError):
            Bloom(title="Silent", resonance=-0.1)

    def test_blank_phrases_dropped(self):
        bloom = Bloom(title="Blank", wake_phrases=["", "  ", " keep me "])
        assert bloom.wake_phrases == ["keep me"]

    def test_from_dict_accepts_single_phrase_field(self):
        bloom = Bloom.from_dict({
            "id": "bl-legacy",
            "title": "Legacy",
            "wake_phrase": "old way",
            "created_at": datetime(2024, 1, 15).isoformat(),
        })
        assert bloom.wake_phrases == ["old way"]
        assert bloom.created_at == datetime(2024, 1, 15)

    def test_add_wake_phrase(self):
        bloom = Bloom(title="Grow", wake_phrases=["one"])

        assert bloom.add_wake_phrase("two")
        assert not bloom.add_wake_phrase("two")
        assert not bloom.add_wake_phrase("   ")
        assert bloom.wake_phrases == ["one", "two"]
        assert bloom.updated_at is not None

    def test_summary_hides_phrases(self):
        summary = Bloom(title="Secret", wake_phrases=["hidden words"]).to_summary()
        assert "wake_phrases" not in summary
        assert summary["has_wake_phrase"] is True


class TestBloomStore:
    """Tests for BloomStore."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.store = BloomStore(storage_dir=self.temp_dir)

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def add(self, **kwargs):
        bloom = Bloom(**kwargs)
        assert self.store.store(bloom)
        return bloom

    def test_store_and_get(self):
        bloom = self.add(title="Presence", body="Stay.", resonance=0.7, wake_phrases=["be here"])

        loaded = self.store.get(bloom.id)

        assert loaded.title == "Presence"
        assert loaded.wake_phrases == ["be here"]
        assert self.store.count() == 1

    def test_get_missing(self):
        assert self.store.get("bl-nope") is None

    def test_fetch_candidates_limit_and_rank(self):
        self.add(id="low", title="Low", resonance=0.1)
        self.add(id="high", title="High", resonance=0.9)
        self.add(id="curated", title="Curated", resonance=0.0, wake_order=5)

        blooms = self.store.fetch_candidates(2, activate=False)

        assert [b.id for b in blooms] == ["curated", "high"]

    def test_fetch_candidates_activates(self):
        bloom = self.add(title="Wake me")

        self.store.fetch_candidates(10, activate=True)
        self.store.fetch_candidates(10, activate=True)

        reloaded = self.store.get(bloom.id)
        assert reloaded.activation_count == 2
        assert reloaded.last_activated is not None

    def test_fetch_candidates_without_activation(self):
        bloom = self.add(title="Leave me")

        self.store.fetch_candidates(10, activate=False)

        assert self.store.get(bloom.id).activation_count == 0

    def test_fetch_candidates_rejects_non_positive_limit(self):
        bloom = self.add(title="Untouched")

        for limit in (0, -1):
            with pytest.raises(ValueError):
                self.store.fetch_candidates(limit)

        assert self.store.get(bloom.id).activation_count == 0

    def test_append_phrase(self):
        bloom = self.add(title="Quiet")

        assert self.store.append_phrase(bloom.id, "still water")
        assert self.store.get(bloom.id).wake_phrases == ["still water"]
        assert self.store.get_stats()["with_wake_phrase"] == 1

    def test_append_existing_phrase_succeeds(self):
        bloom = self.add(title="Quiet", wake_phrases=["still water"])
        assert self.store.append_phrase(bloom.id, "still water")
        assert self.store.get(bloom.id).wake_phrases == ["still water"]

    def test_append_phrase_unknown_bloom(self):
        assert not self.store.append_phrase("bl-missing", "anything")

    def test_index_survives_reload(self):
        bloom = self.add(title="Persist")

        reopened = BloomStore(storage_dir=self.temp_dir)

        assert reopened.get(bloom.id).title == "Persist"

    def test_corrupted_index_is_rebuilt(self):
        bloom = self.add(title="Survivor")
        with open(self.store.index_file, "w") as f:
            f.write("{not json")

        reopened = BloomStore(storage_dir=self.temp_dir)

        assert reopened.get(bloom.id).title == "Survivor"
        with open(reopened.index_file) as f:
            assert bloom.id in json.load(f)["primary_index"]

    def test_update_wake_order_resequences(self):
        self.add(id="a", title="A", wake_order=1)
        self.add(id="b", title="B", wake_order=2)

        self.store.update("b", wake_order=0)
        assert [b.id for b in self.store.fetch_candidates(10, activate=False)] == ["b", "a"]

        updated = self.store.update("b", wake_order=None)
        assert updated.wake_order is None
        assert self.store.get("b").wake_order is None
        assert [b.id for b in self.store.fetch_candidates(10, activate=False)] == ["a", "b"]

    def test_update_fields_and_phrases(self):
        bloom = self.add(title="Old", wake_phrases=["keep", "drop"])

        updated = self.store.update(
            bloom.id, title="New", resonance=0.9, add_phrase="fresh", remove_phrase="drop"
        )

        reloaded = self.store.get(bloom.id)
        assert updated.updated_at is not None
        assert reloaded.title == "New"
        assert reloaded.resonance == 0.9
        assert reloaded.wake_phrases == ["keep", "fresh"]

    def test_update_rejects_invalid_values(self):
        bloom = self.add(title="Steady", resonance=0.4)

        with pytest.raises(ValueError):
            self.store.update(bloom.id, resonance=1.5)
        with pytest.raises(ValueError):
            self.store.update(bloom.id, activation_count=99)

        assert self.store.get(bloom.id).resonance == 0.4

    def test_update_missing_bloom(self):
        assert self.store.update("bl-missing", title="Nobody") is None

    def test_delete(self):
        bloom = self.add(title="Gone")

        assert self.store.delete(bloom.id)
        assert self.store.get(bloom.id) is None
        assert not self.store.delete(bloom.id)

    def test_iter_all(self):
        self.add(title="One")
        self.add(title="Two")
        assert sorted(b.title for b in self.store.iter_all()) == ["One", "Two"]

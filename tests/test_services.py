"""
Tests for the address, entropy and lock helpers.
"""
import threading

import pytest

from core.engine import TransitionEngine
from core.event_sink import InMemoryEventSink
from core.exceptions import InvalidAddress
from core.locks import IdentityLocks
from core.record_store import InMemoryRecordStore
from core.records import PlayerRecord, RecordKind
from services.address_service import standardize_address
from services.entropy_service import (
    ScriptedEntropy,
    clock_millis,
    clock_seconds,
    get_entropy_source,
)


class TestStandardizeAddress:
    def test_pads_to_fixed_width(self):
        assert standardize_address("0x1") == "0x" + "0" * 63 + "1"

    def test_prefix_and_case_insensitive(self):
        assert standardize_address("0xABC") == standardize_address("abc")

    def test_full_width_passes_through(self):
        address = "0x" + "f" * 64
        assert standardize_address(address) == address

    @pytest.mark.parametrize("address", ["", "0x", "0xg1", "0x" + "1" * 65, None, 42])
    def test_rejects_malformed(self, address):
        with pytest.raises(InvalidAddress):
            standardize_address(address)


class TestEntropy:
    def test_named_sources(self):
        assert get_entropy_source("clock") is clock_seconds
        assert get_entropy_source("clock_ms") is clock_millis

    def test_unknown_source(self):
        with pytest.raises(ValueError):
            get_entropy_source("vrf")

    def test_clock_is_non_decreasing(self):
        first = clock_seconds()
        assert clock_seconds() >= first > 0

    def test_scripted_entropy_runs_out(self):
        entropy = ScriptedEntropy([4, 5])
        assert [entropy(), entropy()] == [4, 5]
        with pytest.raises(RuntimeError):
            entropy()


class TestIdentityLocks:
    def test_same_key_same_shard(self):
        locks = IdentityLocks(shards=16)
        assert locks.shard_for("0xabc") == locks.shard_for("0xabc")
        assert 0 <= locks.shard_for("0xabc") < len(locks)

    def test_needs_at_least_one_shard(self):
        with pytest.raises(ValueError):
            IdentityLocks(shards=0)

    def test_concurrent_flips_for_one_identity_stay_dense(self):
        """Flips serialized through the lock never reuse or skip a game_id."""
        store = InMemoryRecordStore()
        sink = InMemoryEventSink()
        engine = TransitionEngine(store=store, sink=sink, entropy_source=lambda: 0)
        locks = IdentityLocks(shards=4)
        address = "0xa11ce"

        def worker():
            for _ in range(25):
                with locks.hold(address):
                    engine.flip(address, 0)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.get(RecordKind.PLAYER, address) == PlayerRecord(address, 200, 200, 0)
        assert sorted(game_id for _, game_id in store.games) == list(range(1, 201))
        assert len(sink.events) == 200

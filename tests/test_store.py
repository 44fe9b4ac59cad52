from blockzone.worker.config import WorkerConfig
from blockzone.worker.store import JsonFileKV, MemoryKV, Namespaces


def test_memory_kv_json_helpers_and_prefix_listing():
    kv = MemoryKV()
    kv.put_json("player:a", {"id": "a"})
    kv.put("fingerprint:x", "{}")
    assert kv.get_json("player:a") == {"id": "a"}
    assert kv.get_json("missing") is None
    assert kv.list_keys("player:") == ["player:a"]
    kv.delete("player:a")
    assert kv.get("player:a") is None


def test_json_file_kv_survives_a_reopen(tmp_path):
    path = tmp_path / "scores.json"
    kv = JsonFileKV(path)
    kv.put_json("leaderboard:neon_drop:all", {"scores": [{"score": 5}]})
    reopened = JsonFileKV(path)
    assert reopened.get_json("leaderboard:neon_drop:all") == {"scores": [{"score": 5}]}


def test_on_disk_namespaces_are_separate_files(tmp_path):
    ns = Namespaces.on_disk(tmp_path)
    ns.players.put("k", "p")
    ns.scores.put("k", "s")
    assert (tmp_path / "players.json").exists()
    assert ns.players.get("k") == "p"
    assert ns.sessions.get("k") is None


def test_config_from_env_coerces_types():
    config = WorkerConfig.from_env({
        "BLOCKZONE_LEADERBOARD_SIZE": "50",
        "BLOCKZONE_DEFAULT_PASS_AMOUNT": "3.5",
        "BLOCKZONE_SEED_SALT": "pepper",
    })
    assert config.leaderboard_size == 50
    assert config.default_pass_amount == 3.5
    assert config.seed_salt == "pepper"
    assert config.reset_hour == 23

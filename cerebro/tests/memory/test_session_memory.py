from cerebro.memory.session_memory import SessionMemory

PLAYER = {"unique_id": "p1", "name_split": "Jane Doe", "team": "State U", "position": "PG", "pts_g": 18.2}


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_set_then_get_returns_minimal_projection():
    memory = SessionMemory(clock=Clock())
    memory.set("s1", PLAYER)
    assert memory.get("s1") == {"unique_id": "p1", "name_split": "Jane Doe", "team": "State U", "position": "PG"}
    assert memory.get("other") is None


def test_entries_expire_after_ttl():
    clock = Clock()
    memory = SessionMemory(ttl=1800, clock=clock)
    memory.set("s1", PLAYER)
    clock.now += 1800
    assert memory.get("s1") is not None
    clock.now += 1
    assert memory.get("s1") is None
    assert len(memory) == 0


def test_set_without_identifier_is_a_no_op():
    memory = SessionMemory(clock=Clock())
    memory.set("s1", {"name_split": "No Id"})
    memory.set("s1", None)
    memory.set("", PLAYER)
    assert memory.get("s1") is None
    assert len(memory) == 0


def test_session_ids_truncated_to_128_chars():
    memory = SessionMemory(clock=Clock())
    memory.set("a" * 200, PLAYER)
    assert memory.get("a" * 128)["unique_id"] == "p1"
    assert memory.get("a" * 150)["unique_id"] == "p1"


def test_capacity_evicts_least_recently_used():
    memory = SessionMemory(max_entries=2, clock=Clock())
    memory.set("s1", PLAYER)
    memory.set("s2", {**PLAYER, "unique_id": "p2"})
    memory.get("s1")
    memory.set("s3", {**PLAYER, "unique_id": "p3"})
    assert memory.get("s2") is None
    assert memory.get("s1")["unique_id"] == "p1"
    assert memory.get("s3")["unique_id"] == "p3"


def test_overwrite_refreshes_entry():
    clock = Clock()
    memory = SessionMemory(ttl=10, clock=clock)
    memory.set("s1", PLAYER)
    clock.now += 8
    memory.set("s1", {**PLAYER, "unique_id": "p9"})
    clock.now += 8
    assert memory.get("s1")["unique_id"] == "p9"

from snapcraft.webui.logs import LogStore


def _filled_store():
    store = LogStore(3)
    store.append("info", "server", "started", None)
    store.append("warn", "auth", "failed login", {"ip": "127.0.0.1"})
    store.append("error", "job", "backup failed", None)
    store.append("info", "job", "newest", None)
    return store


def test_capacity_trim_and_newest_first():
    entries = _filled_store().list("", "", 0)
    assert len(entries) == 3
    assert entries[0].message == "newest"
    assert [e.message for e in entries] == ["newest", "backup failed", "failed login"]


def test_source_filter():
    assert len(_filled_store().list("", "job", 0)) == 2


def test_level_filter():
    errors = _filled_store().list("error", "", 0)
    assert [e.message for e in errors] == ["backup failed"]


def test_limit():
    assert [e.message for e in _filled_store().list(limit=1)] == ["newest"]


def test_clear():
    store = LogStore(10)
    store.append("info", "api", "x", None)
    store.clear()
    assert store.list() == []


def test_fields_are_copied():
    store = LogStore(10)
    fields = {"ip": "127.0.0.1"}
    entry = store.append("warn", "auth", "failed login", fields)
    fields["ip"] = "changed"
    assert entry.fields == {"ip": "127.0.0.1"}
    assert store.append("info", "api", "x", {}).fields is None


def test_non_positive_capacity_uses_default():
    store = LogStore(0)
    for n in range(1001):
        store.append("info", "api", str(n))
    entries = store.list()
    assert len(entries) == 1000
    assert entries[-1].message == "1"
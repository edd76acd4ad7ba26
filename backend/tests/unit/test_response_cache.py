from app.core.cache import ResponseCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_get_returns_value_within_ttl():
    clock = FakeClock()
    cache = ResponseCache(300, clock=clock)

    cache.set("user-1", {"username": "alice"})
    clock.now = 299

    assert cache.get("user-1") == {"username": "alice"}


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = ResponseCache(300, clock=clock)

    cache.set("user-1", "profile")
    clock.now = 300

    assert cache.get("user-1") is None
    assert len(cache) == 0


def test_zero_ttl_disables_cache():
    cache = ResponseCache(0)

    cache.set("video-1", "detail")

    assert not cache.enabled
    assert cache.get("video-1") is None
    assert len(cache) == 0


def test_invalidate_removes_only_given_keys():
    cache = ResponseCache(60)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)

    cache.invalidate("a", "c", "missing")

    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.get("c") is None


def test_clear_empties_cache():
    cache = ResponseCache(60)
    cache.set("a", 1)
    cache.set("b", 2)

    cache.clear()

    assert len(cache) == 0

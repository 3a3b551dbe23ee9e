from packages.payments.providers.gateway.token_cache import TokenCache


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestTokenCache:
    def test_empty_cache(self):
        assert TokenCache().get() is None

    def test_token_served_until_safety_margin(self):
        clock = FakeClock()
        cache = TokenCache(safety_margin_seconds=300, clock=clock)
        cache.set("tok", lifetime_seconds=1800)

        clock.now += 1499
        assert cache.get() == "tok"

        clock.now += 1
        assert cache.get() is None

    def test_lifetime_shorter_than_margin_is_never_served(self):
        cache = TokenCache(safety_margin_seconds=300, clock=FakeClock())
        cache.set("tok", lifetime_seconds=120)
        assert cache.get() is None

    def test_clear(self):
        cache = TokenCache(clock=FakeClock())
        cache.set("tok", lifetime_seconds=1800)
        cache.clear()
        assert cache.get() is None

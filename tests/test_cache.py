from tiketnow.services.cache import TimedCache

from conftest import FakeClock


def make_cache(ttl=30):
    clock = FakeClock()
    return TimedCache(ttl, clock=clock), clock


def test_fresh_hit_and_expiry():
    cache, clock = make_cache()
    cache.put('k', [1])
    clock.advance(29)
    assert cache.get('k') == [1]
    clock.advance(1)
    assert cache.get('k') is None
    assert cache.get_stale('k') == [1]


def test_miss():
    cache, _ = make_cache()
    assert cache.get('k') is None
    assert cache.get_stale('k') is None


def test_older_load_cannot_overwrite_newer():
    cache, _ = make_cache()
    slow = cache.begin()
    fast = cache.begin()

    assert cache.put('k', 'fast', fast)
    assert not cache.put('k', 'slow', slow)
    assert cache.get('k') == 'fast'


def test_update_beats_in_flight_load():
    cache, _ = make_cache()
    cache.put('k', [1])
    in_flight = cache.begin()

    assert cache.update('k', lambda data: data + [2])
    assert not cache.put('k', [1], in_flight)
    assert cache.get('k') == [1, 2]


def test_update_keeps_age():
    cache, clock = make_cache()
    cache.put('k', 'a')
    clock.advance(20)
    cache.update('k', lambda data: 'b')
    clock.advance(10)
    assert cache.get('k') is None


def test_update_missing_key():
    cache, _ = make_cache()
    assert not cache.update('k', lambda data: data)


def test_invalidate_keeps_stale_copy():
    cache, _ = make_cache()
    cache.put('a', 1)
    cache.put('b', 2)
    cache.invalidate('a')
    assert cache.get('a') is None
    assert cache.get('b') == 2

    cache.invalidate()
    assert cache.get('b') is None
    assert cache.get_stale('a') == 1


def test_clear():
    cache, _ = make_cache()
    cache.put('a', 1)
    cache.clear()
    assert cache.get_stale('a') is None


def test_invalidate_rejects_load_started_before_it():
    cache, _ = make_cache()
    cache.put('k', 'old')
    in_flight = cache.begin()

    cache.invalidate('k')
    assert not cache.put('k', 'pre-write rows', in_flight)
    assert cache.get('k') is None

    assert cache.put('k', 'fresh', cache.begin())
    assert cache.get('k') == 'fresh'


def test_invalidate_all_fences_missing_keys():
    cache, _ = make_cache()
    in_flight = cache.begin()
    cache.invalidate()
    assert not cache.put('never-stored', 'old', in_flight)


def test_update_of_missing_key_still_fences():
    cache, _ = make_cache()
    in_flight = cache.begin()
    assert not cache.update('k', lambda data: data)
    assert not cache.put('k', 'old', in_flight)

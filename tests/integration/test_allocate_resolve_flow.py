"""
End-to-end allocate → resolve flows on the in-memory backend.

Each test wires a real Allocator, Resolver and ClickRecorder around one Storage,
the way `create_app()` does, and checks the behaviour a client observes.
"""

import threading

import pytest

from shortlink.errors import AllocationExhausted, ConflictError, NotFoundError
from shortlink.manager.allocator import Allocator
from shortlink.manager.generator import ALPHABET

URL = "https://example.com/a/b"


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com",
        "http://example.com/path?q=1&r=2#frag",
        "https://example.com/path?query=param&other=äöü",
        "https://example.com/" + "a" * 1000,
    ],
)
def test_generated_code_resolves_to_original(allocator, resolver, url):
    allocation = allocator.allocate(url)
    assert len(allocation.short_code) == 6
    assert set(allocation.short_code) <= set(ALPHABET)
    assert resolver.resolve(allocation.short_code) == url


def test_alias_resolves_and_repeat_conflicts(allocator, resolver, storage):
    allocator.allocate(URL, custom_alias="launch")
    assert resolver.resolve("launch") == URL

    for _ in range(2):
        with pytest.raises(ConflictError):
            allocator.allocate("https://elsewhere.example", custom_alias="launch")
    assert resolver.resolve("launch") == URL
    assert len(storage) == 1


def test_third_generated_code_wins_after_two_collisions(storage, resolver, scripted_generator):
    seed = Allocator(storage, generator=scripted_generator("dupe01"))
    seed.allocate("https://first.example")

    allocator = Allocator(storage, generator=scripted_generator("dupe01", "dupe01", "fresh1"))
    allocation = allocator.allocate(URL)

    assert allocation.short_code == "fresh1"
    assert resolver.resolve("fresh1") == URL
    assert resolver.resolve("dupe01") == "https://first.example"


def test_exhaustion_creates_nothing(storage, resolver, scripted_generator):
    Allocator(storage, generator=scripted_generator("dupe01")).allocate("https://first.example")
    with pytest.raises(AllocationExhausted):
        Allocator(storage, generator=scripted_generator("dupe01")).allocate(URL)
    assert len(storage) == 1


def test_unknown_code_not_found(resolver):
    with pytest.raises(NotFoundError):
        resolver.resolve("ghost1")


def test_clicks_accumulate(allocator, resolver, storage, clicks):
    code = allocator.allocate(URL).short_code
    for _ in range(5):
        resolver.resolve(code)
    clicks.shutdown(wait=True)
    mapping = storage.get_mapping(code)
    assert mapping.click_count == 5
    assert mapping.long_url == URL


def test_concurrent_alias_allocation_has_one_winner(allocator, storage):
    """
    Outcome:
        Many threads requesting the same alias → exactly one success, the
        rest ConflictError, and the stored URL belongs to the winner.
    """
    n = 24
    barrier = threading.Barrier(n)
    winners, conflicts = [], []
    lock = threading.Lock()

    def worker(i):
        url = f"https://example.com/{i}"
        barrier.wait()
        try:
            allocator.allocate(url, custom_alias="race-me")
        except ConflictError:
            with lock:
                conflicts.append(url)
        else:
            with lock:
                winners.append(url)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(winners) == 1
    assert len(conflicts) == n - 1
    assert storage.get_mapping("race-me").long_url == winners[0]

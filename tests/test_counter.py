from concurrent.futures import ThreadPoolExecutor

from counter import SequenceCounter


def test_starts_at_one_and_increments():
    counter = SequenceCounter()
    assert counter.last == 0
    assert [counter.next() for _ in range(3)] == [1, 2, 3]
    assert counter.last == 3


def test_concurrent_draws_are_unique_and_contiguous():
    counter = SequenceCounter()
    total = 500
    with ThreadPoolExecutor(max_workers=16) as pool:
        values = list(pool.map(lambda _: counter.next(), range(total)))
    assert sorted(values) == list(range(1, total + 1))

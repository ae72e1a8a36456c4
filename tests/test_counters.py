from datetime import datetime, timedelta, timezone

from toplogs.services.counters import MAX_INSTANT, MIN_INSTANT, DurationWindow, FrequencyTable


def test_increment_counts_per_key():
    table = FrequencyTable()
    table.increment("a")
    table.increment("a")
    table.increment("b")
    assert table["a"] == 2
    assert table["b"] == 1
    assert dict(table.iterate()) == {"a": 2, "b": 1}
    assert table.total() == 3


def test_reading_unknown_key_does_not_insert():
    table = FrequencyTable()
    assert table["missing"] == 0
    assert table.is_empty()
    assert "missing" not in table
    assert len(table) == 0


def test_iterate_is_restartable():
    table = FrequencyTable()
    table.increment(200)
    first = list(table.iterate())
    second = list(table.iterate())
    assert first == second == [(200, 1)]


def test_increment_is_order_independent():
    keys = ["x", "y", "x", "z", "y", "x"]
    forward, backward = FrequencyTable(), FrequencyTable()
    for k in keys:
        forward.increment(k)
    for k in reversed(keys):
        backward.increment(k)
    assert dict(forward.iterate()) == dict(backward.iterate())


def test_window_starts_at_sentinels():
    window = DurationWindow()
    assert window.start == MAX_INSTANT
    assert window.end == MIN_INSTANT
    assert not window.is_set
    assert window.bounds() is None


def test_single_observation_sets_both_bounds():
    ts = datetime(2019, 1, 28, 22, 15, 8, tzinfo=timezone.utc)
    window = DurationWindow()
    window.observe(ts)
    assert window.start == ts
    assert window.end == ts
    assert window.bounds() == (ts, ts)


def test_window_compares_instants_across_offsets():
    # 10:00 at -07:00 is 17:00 UTC, later than 12:00 UTC
    west = datetime(2000, 10, 10, 10, 0, tzinfo=timezone(timedelta(hours=-7)))
    utc = datetime(2000, 10, 10, 12, 0, tzinfo=timezone.utc)
    window = DurationWindow()
    window.observe(west)
    window.observe(utc)
    assert window.start == utc
    assert window.end == west
    assert window.start <= window.end

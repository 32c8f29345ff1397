import pytest

from repsense.signals import collect_baseline, push_sample


def test_push_sample_moving_average_and_eviction():
    history = ()
    history, avg = push_sample(history, 10.0, 3)
    assert history == (10.0,) and avg == pytest.approx(10.0)
    history, avg = push_sample(history, 20.0, 3)
    history, avg = push_sample(history, 30.0, 3)
    assert avg == pytest.approx(20.0)
    history, avg = push_sample(history, 40.0, 3)
    # Oldest (10) evicted, order kept.
    assert history == (20.0, 30.0, 40.0)
    assert avg == pytest.approx(30.0)


def test_push_sample_window_one_is_passthrough():
    history, avg = push_sample((5.0,), 7.0, 1)
    assert history == (7.0,)
    assert avg == 7.0


def test_push_sample_rejects_bad_window():
    with pytest.raises(ValueError):
        push_sample((), 1.0, 0)


def test_collect_baseline():
    samples = ()
    for y in (500.0, 502.0):
        samples, baseline = collect_baseline(samples, y, 3)
        assert baseline is None
    samples, baseline = collect_baseline(samples, 504.0, 3)
    assert samples == (500.0, 502.0, 504.0)
    assert baseline == pytest.approx(502.0)


def test_collect_baseline_rejects_bad_capacity():
    with pytest.raises(ValueError):
        collect_baseline((), 1.0, 0)

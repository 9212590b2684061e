import pytest

from faucet_miner.progress import ProgressReporter, progress_percent


class FakeClock:
    def __init__(self):
        self.t = 100.0

    def __call__(self):
        return self.t


def test_progress_percent_capped_below_100():
    assert progress_percent(8, 1) == pytest.approx(50.0)
    assert progress_percent(16, 1) == 99.0
    assert progress_percent(10_000, 1) == 99.0
    assert progress_percent(0, 5) == 0.0


def test_reporter_rate_limit_and_fields():
    clock = FakeClock()
    got = []
    rep = ProgressReporter(difficulty=4, callback=got.append, min_interval_s=0.5, clock=clock)

    # no time elapsed yet
    assert rep.offer(9, 10, lambda: b"\x01" * 32) is True
    assert got[0].hash_rate == 0.0
    assert got[0].elapsed_ms == 0

    clock.t += 0.2
    assert rep.offer(19, 20, lambda: b"\x02" * 32) is False

    clock.t += 0.4
    assert rep.offer(29, 30, lambda: b"\x03" * 32, reference_value=7) is True

    assert len(got) == 2
    s = got[1]
    assert s.nonce == 29
    assert s.iterations == 30
    assert s.digest == b"\x03" * 32
    assert s.elapsed_ms == 600
    assert s.hash_rate == pytest.approx(30 / 0.6)
    assert s.progress_percent == pytest.approx(30 / 65536 * 100)
    assert s.reference_value == 7
    assert rep.emitted == 2


def test_digest_only_computed_when_emitting():
    clock = FakeClock()
    calls = []

    def digest_fn():
        calls.append(1)
        return b"\x00" * 32

    rep = ProgressReporter(difficulty=2, callback=lambda s: None, min_interval_s=10.0, clock=clock)
    rep.offer(0, 1, digest_fn)
    rep.offer(1, 2, digest_fn)
    rep.offer(2, 3, digest_fn)
    assert len(calls) == 1


def test_no_callback_never_emits():
    rep = ProgressReporter(difficulty=2, callback=None)
    assert rep.offer(0, 1, lambda: b"\x00" * 32) is False
    assert rep.emitted == 0


def test_callback_errors_propagate():
    def boom(sample):
        raise RuntimeError("observer failed")

    rep = ProgressReporter(difficulty=2, callback=boom)
    with pytest.raises(RuntimeError):
        rep.offer(0, 1, lambda: b"\x00" * 32)

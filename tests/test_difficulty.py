import pytest

from faucet_miner.difficulty import (
    MAX_DIFFICULTY,
    expected_iterations,
    expected_time_seconds,
    format_duration,
    meets_target,
    target,
)
from faucet_miner.errors import InvalidDifficulty


def test_target_values():
    assert target(0) == 2**256
    assert target(1) == 2**252
    assert target(4) == 2**240
    assert target(MAX_DIFFICULTY) == 2**4


def test_target_strictly_decreasing_and_work_increasing():
    for d in range(MAX_DIFFICULTY):
        assert target(d + 1) < target(d)
        assert expected_iterations(d + 1) > expected_iterations(d)


def test_expected_iterations_and_time():
    assert expected_iterations(0) == 1
    assert expected_iterations(4) == 65536
    assert expected_time_seconds(4) == pytest.approx(65536 / 50_000)
    assert expected_time_seconds(2, assumed_hash_rate=256.0) == pytest.approx(1.0)
    with pytest.raises(ValueError):
        expected_time_seconds(2, assumed_hash_rate=0)


@pytest.mark.parametrize("bad", [-1, 64, 65, 1000, 1.5, True, "3", None])
def test_invalid_difficulty(bad):
    with pytest.raises(InvalidDifficulty) as ei:
        target(bad)
    assert ei.value.difficulty == bad
    with pytest.raises(InvalidDifficulty):
        expected_iterations(bad)


def test_invalid_difficulty_is_value_error():
    with pytest.raises(ValueError):
        target(64)


def test_meets_target_is_strict():
    t = target(1)
    assert meets_target((t - 1).to_bytes(32, "big"), t)
    assert not meets_target(t.to_bytes(32, "big"), t)
    # difficulty 0 admits even the largest digest
    assert meets_target(b"\xff" * 32, target(0))


def test_format_duration():
    assert format_duration(1.3) == "1s"
    assert format_duration(59) == "59s"
    assert format_duration(120) == "2m"
    assert format_duration(7200) == "2h"

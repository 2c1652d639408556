"""Tests for credential rotation."""

import random

import pytest

from interview_prep.keys import CredentialPool


def test_empty_pool_rejected():
    with pytest.raises(ValueError, match="at least one key"):
        CredentialPool([])


def test_single_key_always_selected():
    pool = CredentialPool(["only"])
    assert [pool.select_credential() for _ in range(5)] == ["only"] * 5
    assert pool.usage_counts == [5]


@pytest.mark.parametrize("size", [2, 3, 5, 15])
@pytest.mark.parametrize("seed", [0, 1, 42])
def test_usage_stays_balanced(size, seed):
    pool = CredentialPool([f"k{i}" for i in range(size)], rng=random.Random(seed))
    for _ in range(size * 7):
        pool.select_credential()
        assert max(pool.usage_counts) - min(pool.usage_counts) <= 1


@pytest.mark.parametrize("size", [2, 3, 4])
def test_no_back_to_back_repeats(size):
    pool = CredentialPool([f"k{i}" for i in range(size)], rng=random.Random(7))
    picks = [pool.select_credential() for _ in range(size * 10)]
    for previous, current in zip(picks, picks[1:]):
        assert previous != current


def test_every_key_used_once_per_round():
    keys = ["a", "b", "c", "d"]
    pool = CredentialPool(keys, rng=random.Random(3))
    first_round = {pool.select_credential() for _ in keys}
    assert first_round == set(keys)


def test_last_used_index_tracks_selection():
    pool = CredentialPool(["a", "b"], rng=random.Random(0))
    assert pool.last_used_index is None
    key = pool.select_credential()
    assert pool.credentials[pool.last_used_index] == key

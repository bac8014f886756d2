"""
Unit tests for the particle arena.
"""

import pytest

from sampling_lab.particles import ParticleArena


def test_spawn_and_grow():
    arena = ParticleArena(capacity=2)
    for i in range(5):
        arena.spawn(float(i), 0.0, 100.0, i)
    assert len(arena) == 5
    assert arena.capacity >= 5
    assert arena.live_bins().tolist() == [0, 1, 2, 3, 4]


def test_remove_swaps_last_in():
    arena = ParticleArena()
    for b in (7, 8, 9):
        arena.spawn(0.0, 0.0, 10.0, b)
    assert arena.remove_at(0) == 7
    assert sorted(arena.live_bins().tolist()) == [8, 9]
    assert arena.live_bins()[0] == 9
    with pytest.raises(IndexError):
        arena.remove_at(2)


def test_particles_fall_and_land_once():
    arena = ParticleArena()
    arena.spawn(0.0, 0.0, 100.0, 3)
    assert arena.step(0.1, 1400.0).size == 0
    assert arena.y[0] == pytest.approx(14.0)
    landed = arena.step(1.0, 1400.0)
    assert landed.tolist() == [3]
    assert not arena
    assert arena.step(1.0, 1400.0).size == 0


def test_particles_never_pass_their_target():
    arena = ParticleArena()
    arena.spawn(0.0, 0.0, 10.0, 1)
    arena.spawn(0.0, 0.0, 1000.0, 2)
    arena.spawn(0.0, 0.0, 10.0, 3)
    landed = arena.step(0.1, 1400.0)
    assert sorted(landed.tolist()) == [1, 3]
    assert arena.live_bins().tolist() == [2]
    assert arena.y[0] <= arena.target_y[0]


def test_counts_and_land_all():
    arena = ParticleArena()
    for b in (1, 1, 4):
        arena.spawn(0.0, 0.0, 50.0, b)
    assert arena.count_by_bin(6).tolist() == [0, 2, 0, 0, 1, 0]
    assert arena.count_in_bin(1) == 2
    assert sorted(arena.land_all().tolist()) == [1, 1, 4]
    assert len(arena) == 0
    xs, ys = arena.positions()
    assert xs.size == ys.size == 0

"""Tests for the package surface."""

import importlib

import pytest

import shot_solver

MODULES = [
    "shot_solver",
    "shot_solver.config",
    "shot_solver.dispersion",
    "shot_solver.hub",
    "shot_solver.optimizer",
    "shot_solver.preview",
    "shot_solver.shooting",
    "shot_solver.state",
    "shot_solver.trajectory_simulator",
]


@pytest.mark.parametrize("name", MODULES)
def test_module_header_carries_license(name):
    doc = importlib.import_module(name).__doc__
    assert "Author: FRC Trajectory Tools" in doc
    assert "License: MIT" in doc


def test_public_names_resolve():
    for name in shot_solver.__all__:
        assert getattr(shot_solver, name) is not None

"""Tests for Newton solver settings."""

import dataclasses

import pytest

from algloop.core.settings import NewtonSettings


def test_settings_defaults():
    """Test default tolerances and iteration limit."""
    settings = NewtonSettings()

    assert settings.atol == 1e-10
    assert settings.rtol == 1e-6
    assert settings.max_iterations == 50


@pytest.mark.parametrize(
    "kwargs",
    [{"atol": 0.0}, {"atol": -1e-8}, {"rtol": 0.0}, {"max_iterations": 0}],
)
def test_settings_validation(kwargs):
    """Test that invalid settings are rejected."""
    with pytest.raises(ValueError):
        NewtonSettings(**kwargs)


def test_settings_frozen():
    """Settings are immutable during a solve."""
    settings = NewtonSettings()

    with pytest.raises(dataclasses.FrozenInstanceError):
        settings.atol = 1.0


def test_settings_from_mapping():
    """Test building settings from a parsed settings file."""
    settings = NewtonSettings.from_mapping({"atol": "1e-8", "max_iterations": 10})

    assert settings.atol == 1e-8
    assert settings.rtol == 1e-6
    assert settings.max_iterations == 10


def test_settings_from_mapping_unknown_key():
    """Unknown keys are reported, not ignored."""
    with pytest.raises(ValueError, match="newt_max"):
        NewtonSettings.from_mapping({"newt_max": 10})


def test_settings_replace_validates():
    """Test replace() returns a validated copy."""
    settings = NewtonSettings().replace(rtol=1e-4)

    assert settings.rtol == 1e-4
    with pytest.raises(ValueError):
        settings.replace(rtol=-1.0)

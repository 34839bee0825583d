"""Tests for config module."""
import dataclasses

import pytest
from uav_sim import config
from uav_sim import constants as C


def test_simulation_config_defaults():
    """Test that default config uses constants values."""
    cfg = config.SimulationConfig()
    assert cfg.dt == C.DT
    assert cfg.t_f == C.T_F
    assert cfg.t_eps == C.T_EPS
    assert cfg.solver_type == config.SolverType.FORWARD_EULER
    assert cfg.controller_type == config.ControllerType.TRIMMED
    assert cfg.trim_airspeed == C.TRIM_AIRSPEED
    assert cfg.kp_roll == C.KP_ROLL
    assert cfg.record_states and cfg.record_inputs


def test_simulation_config_custom_values():
    """Test creating config with custom values."""
    cfg = config.SimulationConfig(dt=0.05, t_f=100.0, verbose=False)
    assert cfg.dt == 0.05
    assert cfg.t_f == 100.0
    assert cfg.verbose is False


def test_simulation_config_frozen():
    """Test that config is immutable (frozen)."""
    cfg = config.SimulationConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.dt = 0.5


def test_replace_derives_new_config():
    cfg = config.SimulationConfig()
    cfg2 = dataclasses.replace(cfg, static_output=(0.0, -0.1, 0.3, 0.0))
    assert cfg.static_output == C.DEFAULT_STATIC_OUTPUT
    assert cfg2.static_output == (0.0, -0.1, 0.3, 0.0)


def test_requires_trim():
    assert not config.SimulationConfig(controller_type=config.ControllerType.STATIC).requires_trim
    assert config.SimulationConfig(controller_type=config.ControllerType.TRIMMED).requires_trim
    assert config.SimulationConfig(controller_type=config.ControllerType.FEEDBACK).requires_trim


def test_num_frames():
    assert config.SimulationConfig(t_0=0.0, t_f=10.0, dt=1.0).num_frames == 10
    assert config.SimulationConfig(t_0=0.0, t_f=1.0, dt=0.1).num_frames == 10


def test_solver_type_values():
    assert config.SolverType(0) is config.SolverType.FORWARD_EULER
    assert config.SolverType(1) is config.SolverType.RK45
    assert config.SolverType(2) is config.SolverType.BDF
    with pytest.raises(ValueError):
        config.SolverType(7)


def test_create_default_config():
    """Test create_default_config factory function."""
    cfg = config.create_default_config()
    assert isinstance(cfg, config.SimulationConfig)
    assert cfg.dt == C.DT


def test_create_test_config():
    """Test create_test_config factory function."""
    cfg = config.create_test_config()
    assert cfg.dt == 0.01
    assert cfg.t_f == 1.0
    assert cfg.verbose is False


def test_create_test_config_custom():
    """Test create_test_config with custom parameters."""
    cfg = config.create_test_config(dt=0.05, t_f=5.0, solver_type=2)
    assert cfg.dt == 0.05
    assert cfg.t_f == 5.0
    assert cfg.solver_type == config.SolverType.BDF

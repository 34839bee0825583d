"""Tests for the trim solver."""
import pytest
import numpy as np
from uav_sim import trim
from uav_sim import constants as C
from uav_sim.config import create_test_config
from uav_sim.dynamics import DynamicsModel, DynamicsOutput, FixedWingDynamics
from uav_sim.errors import NotYetComputed, TrimDivergence
from uav_sim.frames import euler_to_rotation_matrix, flight_path_angle
from uav_sim.state import OMEGA, VELOCITY


class ConstantForceDynamics(DynamicsModel):
    """Dynamics with a net force that no state/control can cancel."""

    def __init__(self):
        self.calls = 0

    def evaluate(self, state, control, t):
        self.calls += 1
        return DynamicsOutput(np.array([1.0, 0.0, 0.0]), np.zeros(3), np.zeros(state.dimension))


@pytest.fixture(scope="module")
def level_trimmer():
    trimmer = trim.Trimmer(create_test_config())
    trimmer.calc_trim()
    return trimmer


def test_accessors_before_calc_trim():
    trimmer = trim.Trimmer(create_test_config())
    assert not trimmer.is_trimmed
    with pytest.raises(NotYetComputed):
        trimmer.get_trim_state()
    with pytest.raises(NotYetComputed):
        trimmer.get_trim_controls()
    with pytest.raises(NotYetComputed):
        trimmer.get_trim_result()


def test_level_trim_is_equilibrium(level_trimmer):
    cfg = level_trimmer.config
    result = level_trimmer.get_trim_result()
    assert np.linalg.norm(result.forces) < cfg.trim_tolerance
    assert np.linalg.norm(result.torques) < cfg.trim_tolerance
    assert result.residual_norm < 10 * cfg.trim_tolerance
    assert result.iterations > 0


def test_level_trim_reevaluated_derivative_is_zero(level_trimmer):
    state = level_trimmer.get_trim_state()
    controls = level_trimmer.get_trim_controls()
    out = FixedWingDynamics().evaluate(state, controls, 0.0)
    np.testing.assert_allclose(out.state_derivative[VELOCITY], 0.0, atol=1e-6)
    np.testing.assert_allclose(out.state_derivative[OMEGA], 0.0, atol=1e-5)


def test_level_trim_values(level_trimmer):
    state = level_trimmer.get_trim_state()
    controls = level_trimmer.get_trim_controls()
    assert state.airspeed == pytest.approx(C.TRIM_AIRSPEED)
    np.testing.assert_array_equal(state.omega, np.zeros(3))
    assert state.euler[0] == pytest.approx(0.0, abs=1e-6)
    # Level flight: pitch equals angle of attack
    alpha = np.arctan2(state.velocity[2], state.velocity[0])
    assert state.euler[1] == pytest.approx(alpha, abs=1e-6)
    assert 0.0 < alpha < np.radians(10.0)
    assert controls[C.IDX_ELEVATOR] < 0.0
    assert 0.0 < controls[C.IDX_THROTTLE] < 1.0
    assert controls[C.IDX_AILERON] == pytest.approx(0.0, abs=1e-6)
    assert controls[C.IDX_RUDDER] == pytest.approx(0.0, abs=1e-6)


def test_trim_keeps_yaw_and_position():
    cfg = create_test_config(init_euler=(0.0, 0.0, 1.2), init_position=(5.0, 6.0, -300.0))
    trimmer = trim.Trimmer(cfg)
    trimmer.calc_trim()
    state = trimmer.get_trim_state()
    assert state.euler[2] == 1.2
    np.testing.assert_array_equal(state.position, [5.0, 6.0, -300.0])


def test_climbing_trim():
    gamma = np.radians(3.0)
    trimmer = trim.Trimmer(create_test_config(trim_gamma=gamma))
    trimmer.calc_trim()
    state = trimmer.get_trim_state()
    v_ned = euler_to_rotation_matrix(state.euler) @ state.velocity
    assert flight_path_angle(v_ned) == pytest.approx(gamma, abs=1e-6)


def test_climb_needs_more_throttle(level_trimmer):
    trimmer = trim.Trimmer(create_test_config(trim_gamma=np.radians(3.0)))
    trimmer.calc_trim()
    assert trimmer.get_trim_controls()[C.IDX_THROTTLE] > level_trimmer.get_trim_controls()[C.IDX_THROTTLE]


def test_accessors_return_copies(level_trimmer):
    controls = level_trimmer.get_trim_controls()
    controls[0] = 99.0
    assert level_trimmer.get_trim_controls()[0] != 99.0
    state = level_trimmer.get_trim_state()
    state.velocity[0] = -1.0
    assert level_trimmer.get_trim_state().velocity[0] > 0.0


def test_divergence_raises():
    dynamics = ConstantForceDynamics()
    trimmer = trim.Trimmer(create_test_config(trim_max_iterations=50), dynamics)
    with pytest.raises(TrimDivergence) as exc_info:
        trimmer.calc_trim()
    assert exc_info.value.residual.shape == (8,)
    assert exc_info.value.residual_norm >= 1.0
    assert not trimmer.is_trimmed
    with pytest.raises(NotYetComputed):
        trimmer.get_trim_state()


def test_iteration_budget_exhausted():
    trimmer = trim.Trimmer(create_test_config(trim_max_iterations=1))
    with pytest.raises(TrimDivergence) as exc_info:
        trimmer.calc_trim()
    assert exc_info.value.iterations == 1


def test_dynamics_model_not_mutated():
    model = FixedWingDynamics()
    before = dict(vars(model))
    trim.Trimmer(create_test_config(), model).calc_trim()
    for key, value in vars(model).items():
        np.testing.assert_array_equal(value, before[key])

"""Tests for the integration supervisor."""
import pytest
import numpy as np
from uav_sim import constants as C
from uav_sim.config import ControllerType, create_test_config
from uav_sim.dynamics import DynamicsModel, DynamicsOutput
from uav_sim.errors import InitializationError, ShapeMismatch, StaleDerivative
from uav_sim.state import STATE_DIM
from uav_sim.supervisor import IntegrationSupervisor
from uav_sim.validation import ValidationError


class ConstantDerivativeDynamics(DynamicsModel):
    """Dynamics returning the same flat derivative for every state."""

    def __init__(self, derivative):
        self.derivative = np.asarray(derivative, dtype=np.float64)
        self.calls = 0

    def evaluate(self, state, control, t):
        self.calls += 1
        return DynamicsOutput(np.zeros(3), np.zeros(3), self.derivative.copy())


def _config(**overrides):
    defaults = dict(
        controller_type=ControllerType.STATIC,
        init_vel_linear_body=(0.0, 0.0, 0.0),
        t_0=0.0, t_f=10.0, dt=1.0,
    )
    defaults.update(overrides)
    return create_test_config(**defaults)


def _derivative(index=11, value=-9.81, n=STATE_DIM):
    d = np.zeros(n)
    d[index] = value
    return d


@pytest.fixture
def supervisor():
    cfg = _config()
    sup = IntegrationSupervisor(cfg, ConstantDerivativeDynamics(_derivative()))
    sup.initialize_sim_state(cfg)
    sup.initialize_controller(cfg)
    return sup


def test_initialize_sim_state_from_config():
    cfg = _config(init_position=(1.0, 2.0, -50.0), init_euler=(0.1, 0.2, 0.3), t_0=2.5)
    sup = IntegrationSupervisor(cfg, ConstantDerivativeDynamics(_derivative()))
    sup.initialize_sim_state(cfg)
    np.testing.assert_array_equal(sup.state.position, [1.0, 2.0, -50.0])
    np.testing.assert_array_equal(sup.state.euler, [0.1, 0.2, 0.3])
    assert sup.time == 2.5
    assert sup.step_count == 0


def test_initialize_twice_raises(supervisor):
    with pytest.raises(InitializationError):
        supervisor.initialize_sim_state(supervisor.config)
    with pytest.raises(InitializationError):
        supervisor.initialize_controller(supervisor.config)


def test_controller_before_state_raises():
    cfg = _config()
    sup = IntegrationSupervisor(cfg, ConstantDerivativeDynamics(_derivative()))
    with pytest.raises(InitializationError):
        sup.initialize_controller(cfg)


def test_sim_step_before_init_raises():
    cfg = _config()
    sup = IntegrationSupervisor(cfg, ConstantDerivativeDynamics(_derivative()))
    with pytest.raises(InitializationError):
        sup.sim_step(0.0)


def test_sim_step_is_pure(supervisor):
    before = supervisor.state
    out1 = supervisor.sim_step(0.0)
    out2 = supervisor.sim_step(0.0)
    assert supervisor.state == before
    assert supervisor.time == 0.0
    np.testing.assert_array_equal(out1.state_derivative, out2.state_derivative)
    np.testing.assert_array_equal(supervisor.controls, C.DEFAULT_STATIC_OUTPUT)


def test_integrate_fe_without_sim_step(supervisor):
    with pytest.raises(StaleDerivative):
        supervisor.integrate_fe()


def test_integrate_fe_consumes_derivative(supervisor):
    supervisor.sim_step(0.0)
    supervisor.integrate_fe()
    with pytest.raises(StaleDerivative):
        supervisor.integrate_fe()


def test_integrate_fe_wrong_time(supervisor):
    supervisor.sim_step(0.5)
    with pytest.raises(StaleDerivative):
        supervisor.integrate_fe()


def test_integrate_fe_constant_derivative(supervisor):
    for _ in range(10):
        supervisor.sim_step(supervisor.time)
        supervisor.integrate_fe()
    assert supervisor.step_count == 10
    assert supervisor.time == pytest.approx(10.0)
    assert supervisor.state.velocity[2] == pytest.approx(-98.1, abs=1e-9)


def test_integrate_fe_records_pre_step(supervisor):
    for _ in range(3):
        supervisor.sim_step(supervisor.time)
        supervisor.integrate_fe()
    states = supervisor.state_record
    inputs = supervisor.input_record
    np.testing.assert_allclose(states.times, [0.0, 1.0, 2.0])
    np.testing.assert_array_equal(states.times, inputs.times)
    assert states.values.shape == (3, STATE_DIM)
    np.testing.assert_allclose(states.values[:, 11], [0.0, -9.81, -19.62])
    np.testing.assert_allclose(inputs.values, np.tile(C.DEFAULT_STATIC_OUTPUT, (3, 1)))


def test_recording_disabled():
    cfg = _config(record_states=False, record_inputs=False)
    sup = IntegrationSupervisor(cfg, ConstantDerivativeDynamics(_derivative()))
    sup.initialize_sim_state(cfg)
    sup.initialize_controller(cfg)
    sup.sim_step(0.0)
    sup.integrate_fe()
    assert len(sup.state_record) == 0
    assert len(sup.input_record) == 0


def test_integrate_fe_rejects_non_finite():
    cfg = _config()
    sup = IntegrationSupervisor(cfg, ConstantDerivativeDynamics(_derivative(value=np.inf)))
    sup.initialize_sim_state(cfg)
    sup.initialize_controller(cfg)
    sup.sim_step(0.0)
    with pytest.raises(ValueError):
        sup.integrate_fe()


def test_integrate_fe_rejects_singular_pitch():
    cfg = _config()
    # Pitch rate of 2 rad/s drives theta past the limit in one 1 s step
    sup = IntegrationSupervisor(cfg, ConstantDerivativeDynamics(_derivative(index=1, value=2.0)))
    sup.initialize_sim_state(cfg)
    sup.initialize_controller(cfg)
    sup.sim_step(0.0)
    with pytest.raises(ValidationError):
        sup.integrate_fe()


def test_derivative_length_mismatch():
    cfg = _config()
    sup = IntegrationSupervisor(cfg, ConstantDerivativeDynamics(np.zeros(5)))
    sup.initialize_sim_state(cfg)
    sup.initialize_controller(cfg)
    with pytest.raises(ShapeMismatch):
        sup.sim_step(0.0)


def test_aux_states_carried():
    cfg = _config(init_aux=(1.0, 2.0))
    d = _derivative(n=STATE_DIM + 2)
    d[12] = 0.5
    sup = IntegrationSupervisor(cfg, ConstantDerivativeDynamics(d))
    sup.initialize_sim_state(cfg)
    sup.initialize_controller(cfg)
    sup.sim_step(0.0)
    sup.integrate_fe()
    np.testing.assert_allclose(sup.state.aux, [1.5, 2.0])
    assert sup.state_record.width == STATE_DIM + 2


def test_ode_eval_has_no_side_effects(supervisor):
    before = supervisor.state
    y = supervisor.state.flatten() + 1.0
    dy = supervisor.ode_eval(3.0, y)
    np.testing.assert_array_equal(dy, _derivative())
    assert supervisor.state == before
    assert supervisor.time == 0.0
    assert len(supervisor.state_record) == 0
    assert len(supervisor.input_record) == 0
    assert supervisor.step_count == 0


def test_ode_output_fcn_records_and_commits(supervisor):
    y0 = supervisor.state.flatten()
    assert supervisor.ode_outputFcn(0.0, y0, 'init') is False
    y1 = y0.copy()
    y1[11] = -1.0
    assert supervisor.ode_outputFcn(0.1, y1, '') is False
    assert supervisor.ode_outputFcn(0.1, y1, 'done') is False

    np.testing.assert_array_equal(supervisor.state_record.times, [0.0, 0.1])
    np.testing.assert_array_equal(supervisor.input_record.times, [0.0, 0.1])
    np.testing.assert_array_equal(supervisor.state_record.values[1], y1)
    np.testing.assert_array_equal(supervisor.state.flatten(), y1)
    assert supervisor.time == 0.1
    assert supervisor.step_count == 1


def test_ode_output_fcn_alias(supervisor):
    assert supervisor.ode_output_fcn(0.0, supervisor.state.flatten(), 'init') is False
    assert len(supervisor.state_record) == 1


def test_ode_output_fcn_unknown_flag(supervisor):
    with pytest.raises(ValueError):
        supervisor.ode_outputFcn(0.0, supervisor.state.flatten(), 'bogus')


def test_state_property_is_copy(supervisor):
    s = supervisor.state
    s.position[0] = 1e6
    assert supervisor.state.position[0] == 0.0


def test_initial_state_non_finite_rejected():
    cfg = _config(init_position=(0.0, np.nan, -100.0))
    sup = IntegrationSupervisor(cfg, ConstantDerivativeDynamics(_derivative()))
    with pytest.raises(ValidationError):
        sup.initialize_sim_state(cfg)
    assert sup.state is None
    assert sup.time is None


def test_initial_state_singular_pitch_rejected():
    cfg = _config(init_euler=(0.0, np.radians(90.0), 0.0))
    sup = IntegrationSupervisor(cfg, ConstantDerivativeDynamics(_derivative()))
    with pytest.raises(ValidationError):
        sup.initialize_sim_state(cfg)
    assert sup.state is None


def test_ode_eval_wrong_length(supervisor):
    with pytest.raises(ShapeMismatch):
        supervisor.ode_eval(0.0, np.zeros(STATE_DIM - 1))


def test_ode_output_fcn_wrong_length(supervisor):
    with pytest.raises(ShapeMismatch):
        supervisor.ode_outputFcn(0.0, np.zeros(STATE_DIM - 1), 'init')
    assert len(supervisor.state_record) == 0
    # A rejected vector does not start the run
    assert supervisor.ode_outputFcn(0.0, supervisor.state.flatten(), 'init') is False


def test_ode_output_fcn_init_twice(supervisor):
    y0 = supervisor.state.flatten()
    supervisor.ode_outputFcn(0.0, y0, 'init')
    supervisor.ode_outputFcn(0.5, y0, '')
    with pytest.raises(InitializationError):
        supervisor.ode_outputFcn(0.0, y0, 'init')
    assert supervisor.time == 0.5


def test_ode_output_fcn_backward_step(supervisor):
    y0 = supervisor.state.flatten()
    supervisor.ode_outputFcn(0.0, y0, 'init')
    supervisor.ode_outputFcn(1.0, y0, '')
    with pytest.raises(InitializationError):
        supervisor.ode_outputFcn(0.5, y0, '')
    assert supervisor.time == 1.0
    assert supervisor.step_count == 1


def test_ode_output_fcn_after_done(supervisor):
    y0 = supervisor.state.flatten()
    supervisor.ode_outputFcn(0.0, y0, 'init')
    supervisor.ode_outputFcn(0.0, y0, 'done')
    assert supervisor.finished
    with pytest.raises(InitializationError):
        supervisor.ode_outputFcn(1.0, y0, '')


def test_integrate_fe_after_adaptive_commit(supervisor):
    y0 = supervisor.state.flatten()
    supervisor.ode_outputFcn(0.0, y0, 'init')
    supervisor.ode_outputFcn(0.5, y0, '')
    with pytest.raises(InitializationError):
        supervisor.sim_step(0.5)
    with pytest.raises(InitializationError):
        supervisor.integrate_fe()
    assert supervisor.step_count == 1


def test_adaptive_after_fixed_step(supervisor):
    supervisor.sim_step(0.0)
    supervisor.integrate_fe()
    with pytest.raises(InitializationError):
        supervisor.ode_outputFcn(1.0, supervisor.state.flatten(), '')
    assert len(supervisor.state_record) == 1


def test_step_after_finish(supervisor):
    supervisor.sim_step(0.0)
    supervisor.integrate_fe()
    supervisor.finish()
    with pytest.raises(InitializationError):
        supervisor.sim_step(1.0)

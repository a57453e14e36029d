"""Tests for InertialTorquePartial and the shared TorquePartial contract.

Tests cover:
- Cache lifecycle (time stamp, idempotence, refresh on time change, reset)
- Angular velocity partial against a hand-computed reference and jacfwd
- Add/subtract symmetry and the no-op orientation partial
- Parameter dispatch (supported, unsupported, other body, wrong overload)
- Parameter partials against jacfwd of the inertial torque through the
  degree-two inertia model
- Stale-cache and non-finite upstream propagation
"""

import jax
import jax.numpy as jnp
import pytest

from torquejax.config import get_dtype
from torquejax.constants import GRAVITATIONAL_CONSTANT
from torquejax.estimation import (
    EstimatableParameter,
    ParameterKind,
    gravitational_parameter,
    mean_moment_of_inertia,
    spherical_harmonic_block_indices,
    spherical_harmonics_cosine_block,
    spherical_harmonics_sine_block,
)
from torquejax.linear_algebra import cross_product_matrix
from torquejax.partials import (
    NO_DEPENDENCY,
    IntegratedStateType,
    InertialTorquePartial,
    TorqueModelType,
)
from torquejax.rotational_dynamics import (
    DegreeTwoInertiaModel,
    inertia_normalization_factor,
    inertia_tensor_from_degree_two_coefficients,
    inertial_torque,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_BODY = "Vehicle"
_GM = 398600.0


class _Clock:
    """Mutable simulation time shared with time-dependent providers."""

    def __init__(self):
        self.time = 0.0


class _CountingProvider:
    """Zero-argument provider that counts its evaluations."""

    def __init__(self, fn):
        self._fn = fn
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self._fn()


def _scenario_partial() -> InertialTorquePartial:
    """omega = (0.1, 0, 0.2) rad/s, I = diag(100, 120, 110), k = 1, mu = 398600."""
    _float = get_dtype()
    return InertialTorquePartial(
        lambda: jnp.array([0.1, 0.0, 0.2], dtype=_float),
        lambda: jnp.diag(jnp.array([100.0, 120.0, 110.0], dtype=_float)),
        lambda: 1.0,
        lambda: _GM,
        _BODY,
    )


def _clocked_partial(clock: _Clock) -> InertialTorquePartial:
    """Partial whose providers vary with the clock."""
    _float = get_dtype()

    def omega():
        t = clock.time
        return jnp.array([0.1 + 0.01 * t, -0.02 * t, 0.2], dtype=_float)

    def inertia():
        t = clock.time
        return jnp.array([
            [100.0 + t, 0.5, -0.2],
            [0.5, 120.0, 0.3 * t],
            [-0.2, 0.3 * t, 110.0],
        ], dtype=_float)

    return InertialTorquePartial(
        omega,
        inertia,
        lambda: 1.0 + clock.time,
        lambda: _GM * (1.0 + clock.time),
        _BODY,
    )


def _model() -> DegreeTwoInertiaModel:
    """A 500 kg body with unit reference radius and a full degree-two field."""
    return DegreeTwoInertiaModel(
        gm=GRAVITATIONAL_CONSTANT * 500.0,
        reference_radius=1.0,
        c20=-0.05,
        c21=0.004,
        c22=0.012,
        s21=-0.003,
        s22=0.007,
        mean_moment_of_inertia=0.4,
    )


_OMEGA = (0.1, -0.05, 0.2)


def _model_partial(model: DegreeTwoInertiaModel) -> InertialTorquePartial:
    _float = get_dtype()
    return InertialTorquePartial(
        lambda: jnp.array(_OMEGA, dtype=_float),
        lambda: model.inertia_tensor,
        lambda: model.normalization_factor,
        lambda: model.gm,
        _BODY,
        normalized_coefficients=model.normalized,
    )


def _torque_from_coefficients(model, c20, c21, c22, s21, s22, mean_moment, gm):
    I = inertia_tensor_from_degree_two_coefficients(  # noqa: E741
        c20, c21, c22, s21, s22, mean_moment,
        inertia_normalization_factor(gm, model.reference_radius),
        normalized=model.normalized,
    )
    return inertial_torque(jnp.array(_OMEGA, dtype=get_dtype()), I)


def _assert_close(actual, expected, rtol=1e-10):
    scale = float(jnp.max(jnp.abs(expected)))
    assert jnp.allclose(actual, expected, rtol=rtol, atol=rtol * scale), (actual, expected)


def _evaluate(binding):
    return binding.function(jnp.zeros((3, binding.n_columns), dtype=get_dtype()))


# ===========================================================================
# Identity
# ===========================================================================


class TestIdentity:
    def test_bodies_and_type(self):
        partial = _scenario_partial()
        assert partial.accelerated_body == _BODY
        assert partial.accelerating_body == _BODY
        assert partial.torque_type == TorqueModelType.INERTIAL

    def test_repr(self):
        assert "InertialTorquePartial" in repr(_scenario_partial())


# ===========================================================================
# Cache lifecycle
# ===========================================================================


class TestCacheLifecycle:
    def test_initially_not_updated(self):
        partial = _scenario_partial()
        assert partial.current_time is None
        assert partial.needs_update(0.0)

    def test_update_sets_time(self):
        partial = _scenario_partial()
        partial.update(10.0)
        assert partial.current_time == 10.0
        assert not partial.needs_update(10.0)
        assert partial.needs_update(11.0)

    def test_providers_evaluated_once_per_time(self):
        omega = _CountingProvider(lambda: jnp.array([0.1, 0.0, 0.2]))
        inertia = _CountingProvider(lambda: jnp.diag(jnp.array([100.0, 120.0, 110.0])))
        normalization = _CountingProvider(lambda: 1.0)
        gm = _CountingProvider(lambda: _GM)
        partial = InertialTorquePartial(omega, inertia, normalization, gm, _BODY)

        partial.update(0.0)
        partial.update(0.0)
        assert (omega.calls, inertia.calls, normalization.calls, gm.calls) == (1, 1, 1, 1)

        partial.update(5.0)
        assert (omega.calls, inertia.calls, normalization.calls, gm.calls) == (2, 2, 2, 2)

    def test_no_provider_calls_before_update(self):
        omega = _CountingProvider(lambda: jnp.array([0.1, 0.0, 0.2]))
        InertialTorquePartial(omega, lambda: jnp.eye(3), lambda: 1.0, lambda: _GM, _BODY)
        assert omega.calls == 0

    def test_no_provider_calls_outside_update(self):
        """Writes and parameter bindings only read the cache."""
        providers = (
            _CountingProvider(lambda: jnp.array([0.1, 0.0, 0.2])),
            _CountingProvider(lambda: jnp.diag(jnp.array([100.0, 120.0, 110.0]))),
            _CountingProvider(lambda: 1.0),
            _CountingProvider(lambda: _GM),
        )
        partial = InertialTorquePartial(*providers, _BODY)
        binding = partial.get_parameter_partial_function(gravitational_parameter(_BODY))
        block_binding = partial.get_parameter_partial_function(
            spherical_harmonics_cosine_block(_BODY, ((2, 0), (2, 1), (2, 2)))
        )
        assert [p.calls for p in providers] == [0, 0, 0, 0]

        partial.update(0.0)
        assert [p.calls for p in providers] == [1, 1, 1, 1]

        jacobian = jnp.zeros((3, 6))
        jacobian = partial.write_state_orientation_partial(jacobian)
        jacobian = partial.write_state_angular_velocity_partial(jacobian)
        jacobian = partial.write_state_angular_velocity_partial(jacobian, False)
        partial.write_non_rotational_state_partial(
            jacobian, (_BODY, ""), IntegratedStateType.TRANSLATIONAL
        )
        _evaluate(binding)
        _evaluate(block_binding)
        partial.needs_update(1.0)
        assert [p.calls for p in providers] == [1, 1, 1, 1]

    def test_repeated_update_is_observable_no_op(self):
        """A second update at the same time ignores changed upstream values."""
        clock = _Clock()
        partial = _clocked_partial(clock)
        partial.update(0.0)
        before = partial.cache

        clock.time = 3.0
        partial.update(0.0)
        assert partial.cache is before

    def test_time_change_refreshes_everything(self):
        clock = _Clock()
        partial = _clocked_partial(clock)
        clock.time = 1.0
        partial.update(1.0)
        first = partial.cache

        clock.time = 2.0
        partial.update(2.0)
        second = partial.cache

        for a, b in zip(first, second):
            assert not jnp.array_equal(a, b)

    def test_no_stale_leakage_between_times(self):
        """update(t1), update(t2), update(t1) equals a direct update(t1)."""
        t1, t2 = 1.5, 4.0
        clock = _Clock()
        partial = _clocked_partial(clock)
        for t in (t1, t2, t1):
            clock.time = t
            partial.update(t)

        clock_ref = _Clock()
        clock_ref.time = t1
        reference = _clocked_partial(clock_ref)
        reference.update(t1)

        for cached, expected in zip(partial.cache, reference.cache):
            assert jnp.array_equal(cached, expected)

    def test_reset_current_time_forces_refresh(self):
        omega = _CountingProvider(lambda: jnp.array([0.1, 0.0, 0.2]))
        partial = InertialTorquePartial(
            omega, lambda: jnp.eye(3), lambda: 1.0, lambda: _GM, _BODY
        )
        partial.update(0.0)
        partial.reset_current_time()
        assert partial.current_time is None
        partial.update(0.0)
        assert omega.calls == 2

    def test_cached_quantities(self):
        partial = _scenario_partial()
        partial.update(0.0)
        cache = partial.cache
        assert jnp.array_equal(cache.angular_velocity, jnp.array([0.1, 0.0, 0.2]))
        assert jnp.array_equal(
            cache.angular_velocity_cross_product_matrix,
            cross_product_matrix(jnp.array([0.1, 0.0, 0.2])),
        )
        assert jnp.allclose(cache.inertia_tensor @ cache.inverse_inertia_tensor, jnp.eye(3))
        assert float(cache.inertia_normalization_factor) == pytest.approx(1.0)
        assert float(cache.gravitational_parameter) == pytest.approx(_GM)


# ===========================================================================
# State partials
# ===========================================================================


class TestAngularVelocityPartial:
    def test_scenario_reference(self):
        """-[omega x] I + [(I omega) x] for omega = (0.1, 0, 0.2), I = diag(100, 120, 110)."""
        partial = _scenario_partial()
        partial.update(0.0)
        expected = jnp.array([
            [0.0, 2.0, 0.0],
            [2.0, 0.0, 1.0],
            [0.0, -2.0, 0.0],
        ])
        _assert_close(partial.cache.partial_wrt_angular_velocity, expected)

    def test_matches_jacfwd(self):
        clock = _Clock()
        clock.time = 2.5
        partial = _clocked_partial(clock)
        partial.update(2.5)
        cache = partial.cache
        expected = jax.jacfwd(inertial_torque, argnums=0)(
            cache.angular_velocity, cache.inertia_tensor
        )
        _assert_close(cache.partial_wrt_angular_velocity, expected)

    def test_write_into_default_columns(self):
        partial = _scenario_partial()
        partial.update(0.0)
        jacobian = partial.write_state_angular_velocity_partial(jnp.zeros((3, 6)))
        assert jnp.array_equal(jacobian[:, :3], jnp.zeros((3, 3)))
        assert jnp.array_equal(jacobian[:, 3:], partial.cache.partial_wrt_angular_velocity)

    def test_write_at_offset(self):
        partial = _scenario_partial()
        partial.update(0.0)
        jacobian = partial.write_state_angular_velocity_partial(
            jnp.zeros((9, 12)), True, 3, 6
        )
        assert jnp.array_equal(
            jacobian[3:6, 6:9], partial.cache.partial_wrt_angular_velocity
        )
        assert float(jnp.abs(jacobian).sum()) == pytest.approx(
            float(jnp.abs(partial.cache.partial_wrt_angular_velocity).sum())
        )

    def test_add_then_subtract_restores_zero(self):
        partial = _scenario_partial()
        partial.update(0.0)
        jacobian = jnp.zeros((3, 6))
        jacobian = partial.write_state_angular_velocity_partial(jacobian, True)
        jacobian = partial.write_state_angular_velocity_partial(jacobian, False)
        assert jnp.array_equal(jacobian, jnp.zeros((3, 6)))

    def test_accumulates(self):
        partial = _scenario_partial()
        partial.update(0.0)
        jacobian = partial.write_state_angular_velocity_partial(jnp.ones((3, 6)))
        expected = 1.0 + partial.cache.partial_wrt_angular_velocity
        assert jnp.allclose(jacobian[:, 3:], expected)

    def test_does_not_modify_input(self):
        partial = _scenario_partial()
        partial.update(0.0)
        buffer = jnp.zeros((3, 6))
        partial.write_state_angular_velocity_partial(buffer)
        assert jnp.array_equal(buffer, jnp.zeros((3, 6)))


class TestOrientationPartial:
    @pytest.mark.parametrize("add_contribution", [True, False])
    def test_leaves_block_unchanged(self, add_contribution):
        partial = _scenario_partial()
        partial.update(0.0)
        buffer = jnp.arange(18.0).reshape(3, 6)
        result = partial.write_state_orientation_partial(buffer, add_contribution, 0, 0)
        assert result is buffer
        assert jnp.array_equal(result, jnp.arange(18.0).reshape(3, 6))


class TestStateDependencies:
    def test_no_non_rotational_dependency(self):
        partial = _scenario_partial()
        assert partial.depends_on_non_rotational_state(
            (_BODY, ""), IntegratedStateType.TRANSLATIONAL
        ) is False

    def test_no_additional_state_dependency(self):
        partial = _scenario_partial()
        assert partial.depends_on_additional_state_types(
            (_BODY, ""), IntegratedStateType.CUSTOM
        ) is False

    def test_non_rotational_write_is_no_op(self):
        partial = _scenario_partial()
        partial.update(0.0)
        buffer = jnp.ones((3, 6))
        result = partial.write_non_rotational_state_partial(
            buffer, (_BODY, ""), IntegratedStateType.TRANSLATIONAL
        )
        assert result is buffer


# ===========================================================================
# Parameter dispatch
# ===========================================================================


class TestParameterDispatch:
    @pytest.mark.parametrize(
        "kind",
        [
            ParameterKind.CONSTANT_DRAG_COEFFICIENT,
            ParameterKind.RADIATION_PRESSURE_COEFFICIENT,
            ParameterKind.CONSTANT_ROTATION_RATE,
        ],
    )
    def test_unsupported_scalar_kind(self, kind):
        binding = _scenario_partial().get_parameter_partial_function(
            EstimatableParameter(kind, _BODY)
        )
        assert binding.n_columns == 0
        assert binding.function is None
        assert binding == NO_DEPENDENCY

    def test_unsupported_vector_kind(self):
        binding = _scenario_partial().get_parameter_partial_function(
            EstimatableParameter(ParameterKind.ROTATION_POLE_POSITION, _BODY)
        )
        assert binding == NO_DEPENDENCY

    def test_other_body(self):
        partial = _scenario_partial()
        assert partial.get_parameter_partial_function(gravitational_parameter("Earth")) == NO_DEPENDENCY
        assert partial.get_parameter_partial_function(
            spherical_harmonics_sine_block("Earth", ((2, 1), (2, 2)))
        ) == NO_DEPENDENCY

    def test_block_without_degree_two(self):
        binding = _scenario_partial().get_parameter_partial_function(
            spherical_harmonics_cosine_block(_BODY, spherical_harmonic_block_indices(3, 4, 0, 4))
        )
        assert binding == NO_DEPENDENCY

    def test_scalar_overload_rejects_vector(self):
        with pytest.raises(ValueError, match="scalar"):
            _scenario_partial().get_scalar_parameter_partial_function(
                spherical_harmonics_sine_block(_BODY, ((2, 1), (2, 2)))
            )

    def test_vector_overload_rejects_scalar(self):
        with pytest.raises(ValueError, match="vector"):
            _scenario_partial().get_vector_parameter_partial_function(
                gravitational_parameter(_BODY)
            )

    def test_column_counts(self):
        partial = _scenario_partial()
        assert partial.get_parameter_partial_function(gravitational_parameter(_BODY)).n_columns == 1
        assert partial.get_parameter_partial_function(mean_moment_of_inertia(_BODY)).n_columns == 1
        assert partial.get_parameter_partial_function(
            spherical_harmonics_cosine_block(_BODY, ((2, 0), (2, 1), (2, 2)))
        ).n_columns == 3
        assert partial.get_parameter_partial_function(
            spherical_harmonics_sine_block(_BODY, ((2, 1), (2, 2)))
        ).n_columns == 2

    def test_column_count_is_block_size(self):
        block = spherical_harmonics_cosine_block(_BODY, spherical_harmonic_block_indices(2, 4, 0, 4))
        binding = _scenario_partial().get_parameter_partial_function(block)
        assert binding.n_columns == block.size


class TestParameterPartials:
    def test_gravitational_parameter_closed_form(self):
        """-omega x ((I / mu) omega) = tau / mu = (0, 0.2 / mu, 0)."""
        partial = _scenario_partial()
        partial.update(0.0)
        binding = partial.get_parameter_partial_function(gravitational_parameter(_BODY))
        result = _evaluate(binding)
        assert result.shape == (3, 1)
        assert jnp.all(jnp.isfinite(result))
        _assert_close(result[:, 0], jnp.array([0.0, 0.2 / _GM, 0.0]))

    def test_gravitational_parameter_matches_jacfwd(self):
        model = _model()
        partial = _model_partial(model)
        partial.update(0.0)
        result = _evaluate(partial.get_parameter_partial_function(gravitational_parameter(_BODY)))

        expected = jax.jacfwd(
            lambda gm: _torque_from_coefficients(
                model, model.c20, model.c21, model.c22, model.s21, model.s22,
                model.mean_moment_of_inertia, gm,
            )
        )(model.gm)
        _assert_close(result[:, 0], expected, rtol=1e-9)

    def test_mean_moment_of_inertia_is_zero(self):
        """An isotropic inertia change never produces inertial torque."""
        partial = _model_partial(_model())
        partial.update(0.0)
        result = _evaluate(partial.get_parameter_partial_function(mean_moment_of_inertia(_BODY)))
        assert result.shape == (3, 1)
        assert jnp.allclose(result, jnp.zeros((3, 1)), atol=1e-12)

    @pytest.mark.parametrize("normalized", [True, False])
    def test_cosine_block_matches_jacfwd(self, normalized):
        model = DegreeTwoInertiaModel.from_inertia_tensor(
            _model().inertia_tensor, GRAVITATIONAL_CONSTANT * 500.0, 1.0, normalized=normalized
        )
        partial = _model_partial(model)
        partial.update(0.0)
        result = _evaluate(partial.get_parameter_partial_function(
            spherical_harmonics_cosine_block(_BODY, ((2, 0), (2, 1), (2, 2)))
        ))

        expected = jax.jacfwd(
            lambda c: _torque_from_coefficients(
                model, c[0], c[1], c[2], model.s21, model.s22,
                model.mean_moment_of_inertia, model.gm,
            )
        )(jnp.array([model.c20, model.c21, model.c22]))
        _assert_close(result, expected, rtol=1e-9)

    def test_sine_block_matches_jacfwd(self):
        model = _model()
        partial = _model_partial(model)
        partial.update(0.0)
        result = _evaluate(partial.get_parameter_partial_function(
            spherical_harmonics_sine_block(_BODY, ((2, 1), (2, 2)))
        ))
        assert result.shape == (3, 2)

        expected = jax.jacfwd(
            lambda s: _torque_from_coefficients(
                model, model.c20, model.c21, model.c22, s[0], s[1],
                model.mean_moment_of_inertia, model.gm,
            )
        )(jnp.array([model.s21, model.s22]))
        _assert_close(result, expected, rtol=1e-9)

    def test_block_columns_follow_indices(self):
        """Degree-two terms land in their block columns; others stay zero."""
        model = _model()
        partial = _model_partial(model)
        partial.update(0.0)
        reference = _evaluate(partial.get_parameter_partial_function(
            spherical_harmonics_cosine_block(_BODY, ((2, 0), (2, 1), (2, 2)))
        ))
        block = spherical_harmonics_cosine_block(_BODY, ((3, 0), (2, 2), (4, 1), (2, 0)))
        result = _evaluate(partial.get_parameter_partial_function(block))

        assert result.shape == (3, 4)
        assert jnp.array_equal(result[:, 0], jnp.zeros(3))
        assert jnp.array_equal(result[:, 1], reference[:, 2])
        assert jnp.array_equal(result[:, 2], jnp.zeros(3))
        assert jnp.array_equal(result[:, 3], reference[:, 0])

    def test_binding_reads_cache_at_invocation(self):
        """A binding obtained once stays valid across later updates."""
        clock = _Clock()
        partial = _clocked_partial(clock)
        binding = partial.get_parameter_partial_function(gravitational_parameter(_BODY))

        clock.time = 1.0
        partial.update(1.0)
        first = _evaluate(binding)

        clock.time = 2.0
        partial.update(2.0)
        second = _evaluate(binding)

        cache = partial.cache
        expected = (
            inertial_torque(cache.angular_velocity, cache.inertia_tensor)
            / cache.gravitational_parameter
        )
        assert not jnp.array_equal(first, second)
        _assert_close(second[:, 0], expected)


# ===========================================================================
# Precondition violations and invalid upstream values
# ===========================================================================


class TestInvalidUse:
    def test_write_before_update_is_non_finite(self):
        partial = _scenario_partial()
        jacobian = partial.write_state_angular_velocity_partial(jnp.zeros((3, 6)))
        assert not jnp.all(jnp.isfinite(jacobian[:, 3:]))

    def test_non_finite_upstream_propagates(self):
        partial = InertialTorquePartial(
            lambda: jnp.array([jnp.nan, 0.0, 0.2]),
            lambda: jnp.diag(jnp.array([100.0, 120.0, 110.0])),
            lambda: 1.0,
            lambda: _GM,
            _BODY,
        )
        partial.update(0.0)
        jacobian = partial.write_state_angular_velocity_partial(jnp.zeros((3, 6)))
        assert bool(jnp.any(jnp.isnan(jacobian)))
        result = _evaluate(partial.get_parameter_partial_function(gravitational_parameter(_BODY)))
        assert bool(jnp.any(jnp.isnan(result)))

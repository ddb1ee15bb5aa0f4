"""
Neuron models integrated with a fixed-step RK4 scheme.

Classes:
  - NeuronBase: shared lifecycle (integrator, input currents, free)
  - HodgkinHuxleyNeuron: 4-variable conductance-based model (V, m, h, n)
  - IzhikevichNeuron: 2-variable quadratic model (v, u) with discrete spike reset

Literature references:
  - Hodgkin & Huxley (1952): gate kinetics and ionic currents
  - Izhikevich (2003): "Simple model of spiking neurons", IEEE TNN 14(6)
"""

import logging
from typing import Optional

import numpy as np

from .base import (
    DEFAULT_DT, HH_CONFIG, IZHIKEVICH_PRESETS, IZHIKEVICH_SPIKE_PEAK,
    FiringPattern, HodgkinHuxleyParams, IzhikevichParams, NeuronModel,
)
from .exceptions import ModelReleasedError
from .integrator import RK4Integrator
from .rates import alpha_h, alpha_m, alpha_n, beta_h, beta_m, beta_n, steady_state

logger = logging.getLogger(__name__)


# ============================================================================
# SHARED LIFECYCLE
# ============================================================================

class NeuronBase:
    """
    Common state for single-compartment neurons.

    Subclasses define ``kind``, ``dimension`` and ``_derivatives``. The state
    vector is a contiguous float64 array owned by the neuron and mutated in
    place by the integrator. ``synaptic_current`` is an accumulator: synapses
    add into it, and whoever ticks the network clears it once per step.
    """

    kind: NeuronModel
    dimension: int

    def __init__(self, dt: float = DEFAULT_DT):
        self.state = np.zeros(self.dimension, dtype=np.float64)
        self._i_ext = 0.0
        self._i_syn = 0.0
        self._integrator: Optional[RK4Integrator] = RK4Integrator(
            type(self)._derivatives, self, self.dimension, dt)

    @staticmethod
    def _derivatives(state: np.ndarray, out: np.ndarray, neuron: 'NeuronBase'):
        raise NotImplementedError

    def _check_live(self):
        if self._integrator is None:
            raise ModelReleasedError(f"{type(self).__name__} used after free()")

    @property
    def released(self) -> bool:
        return self._integrator is None

    @property
    def dt(self) -> float:
        self._check_live()
        return self._integrator.dt

    @property
    def voltage(self) -> float:
        """Membrane potential as stored in the state vector (mV)."""
        self._check_live()
        return float(self.state[0])

    @property
    def i_ext(self) -> float:
        self._check_live()
        return self._i_ext

    @property
    def synaptic_current(self) -> float:
        self._check_live()
        return self._i_syn

    def set_external_current(self, i_ext: float):
        """Set the injected current; the value is used as given."""
        self._check_live()
        self._i_ext = float(i_ext)

    def add_synaptic_current(self, i_syn: float):
        """Accumulate a synaptic contribution for the next update."""
        self._check_live()
        self._i_syn += i_syn

    def clear_synaptic_current(self):
        self._check_live()
        self._i_syn = 0.0

    def update(self) -> float:
        raise NotImplementedError

    def free(self):
        """Release the integrator. Further use raises ModelReleasedError."""
        if self._integrator is None:
            return
        self._integrator.free()
        self._integrator = None
        logger.debug("Released %s", type(self).__name__)


# ============================================================================
# HODGKIN-HUXLEY NEURON
# ============================================================================

class HodgkinHuxleyNeuron(NeuronBase):
    """
    Hodgkin-Huxley neuron in the original 1952 voltage convention.

    Includes:
      - Na+, K+ and leak channels with voltage-gated m, h, n kinetics
      - Ionic currents recorded on every derivative evaluation
      - External and accumulated synaptic input currents

    Currents use the "inward positive" sign of the source table:
      I_L = gL (eL - V),  I_K = gK n^4 (eK - V),  I_Na = gNa m^3 h (eNa - V)
      C dV/dt = I_Na + I_K + I_L + I_ext + I_syn
    """

    kind = NeuronModel.HODGKIN_HUXLEY
    dimension = 4

    # State vector layout
    V, M, H, N = range(4)

    def __init__(self, dt: float = DEFAULT_DT, params: HodgkinHuxleyParams = None):
        self.params = params or HH_CONFIG
        self.i_na = 0.0
        self.i_k = 0.0
        self.i_leak = 0.0
        super().__init__(dt)
        self.reset_state()
        logger.debug("Created HodgkinHuxleyNeuron (dt=%g)", dt)

    def reset_state(self):
        """Return to rest with every gate at its steady-state value."""
        self._check_live()
        v_rest = self.params.resting_potential
        self.state[self.V] = v_rest
        self.state[self.M] = steady_state(alpha_m, beta_m, v_rest)
        self.state[self.H] = steady_state(alpha_h, beta_h, v_rest)
        self.state[self.N] = steady_state(alpha_n, beta_n, v_rest)
        self.i_na = self.i_k = self.i_leak = 0.0
        self._i_ext = 0.0
        self._i_syn = 0.0

    @staticmethod
    def _derivatives(state: np.ndarray, out: np.ndarray, neuron: 'HodgkinHuxleyNeuron'):
        p = neuron.params
        v, m, h, n = state

        i_leak = p.g_leak * (p.e_leak - v)
        i_k = p.g_k * n ** 4 * (p.e_k - v)
        i_na = p.g_na * m ** 3 * h * (p.e_na - v)

        neuron.i_leak = float(i_leak)
        neuron.i_k = float(i_k)
        neuron.i_na = float(i_na)

        out[0] = (i_na + i_k + i_leak + neuron._i_ext + neuron._i_syn) / p.C
        out[1] = alpha_m(v) * (1.0 - m) - beta_m(v) * m
        out[2] = alpha_h(v) * (1.0 - h) - beta_h(v) * h
        out[3] = alpha_n(v) * (1.0 - n) - beta_n(v) * n

    def update(self) -> float:
        """Advance one RK4 step and return the new membrane potential."""
        self._check_live()
        self._integrator.step(self.state)
        return float(self.state[self.V])

    @property
    def m(self) -> float:
        self._check_live()
        return float(self.state[self.M])

    @property
    def h(self) -> float:
        self._check_live()
        return float(self.state[self.H])

    @property
    def n(self) -> float:
        self._check_live()
        return float(self.state[self.N])


# ============================================================================
# IZHIKEVICH NEURON
# ============================================================================

class IzhikevichNeuron(NeuronBase):
    """
    Izhikevich neuron: continuous RK4 integration plus a discrete reset.

        dv/dt = 0.04 v^2 + 5 v + 140 - u + I
        du/dt = a (b v - u)
        if v >= 30 mV: v <- c, u <- u + d

    On a spike step ``update`` returns the peak (30 mV) while the stored
    state already holds the reset value, so traces show the spike.
    """

    kind = NeuronModel.IZHIKEVICH
    dimension = 2

    V, U = range(2)

    QUAD_COEFF = 0.04
    LINEAR_COEFF = 5.0
    CONST_TERM = 140.0

    def __init__(self, pattern: FiringPattern = FiringPattern.REGULAR_SPIKING,
                 dt: float = DEFAULT_DT, params: IzhikevichParams = None):
        self.pattern = FiringPattern(pattern)
        self.params = params or IZHIKEVICH_PRESETS[self.pattern]
        self.spike_count = 0
        super().__init__(dt)
        self.reset_state()
        logger.debug("Created IzhikevichNeuron (%s, dt=%g)", self.pattern.name, dt)

    def reset_state(self):
        """Start just below the reset potential with u in equilibrium."""
        self._check_live()
        p = self.params
        self.state[self.V] = p.c - 10.0
        self.state[self.U] = p.b * self.state[self.V]
        self.spike_count = 0
        self._i_ext = 0.0
        self._i_syn = 0.0

    @staticmethod
    def _derivatives(state: np.ndarray, out: np.ndarray, neuron: 'IzhikevichNeuron'):
        p = neuron.params
        v, u = state
        I = neuron._i_ext + neuron._i_syn

        out[0] = (IzhikevichNeuron.QUAD_COEFF * v * v + IzhikevichNeuron.LINEAR_COEFF * v
                  + IzhikevichNeuron.CONST_TERM - u + I)
        out[1] = p.a * (p.b * v - u)

    def update(self) -> float:
        """
        Advance one RK4 step and apply the spike reset.

        Returns the spike peak on a spike step, otherwise the new potential.
        """
        self._check_live()
        self._integrator.step(self.state)

        if self.state[self.V] >= IZHIKEVICH_SPIKE_PEAK:
            self.state[self.V] = self.params.c
            self.state[self.U] += self.params.d
            self.spike_count += 1
            return IZHIKEVICH_SPIKE_PEAK

        return float(self.state[self.V])

    @property
    def recovery(self) -> float:
        self._check_live()
        return float(self.state[self.U])


# ============================================================================
# FACTORY
# ============================================================================

def create_neuron(model: NeuronModel, dt: float = DEFAULT_DT,
                  pattern: FiringPattern = FiringPattern.REGULAR_SPIKING) -> NeuronBase:
    """Create a neuron of the requested kind. ``pattern`` applies to Izhikevich only."""
    model = NeuronModel(model)
    if model == NeuronModel.IZHIKEVICH:
        return IzhikevichNeuron(pattern, dt)
    return HodgkinHuxleyNeuron(dt)

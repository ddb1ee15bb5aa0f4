"""
Kinetic AMPA / GABA-A synapse (Destexhe, Mainen & Sejnowski 1994).

The synapse has one state variable, the open-channel fraction r:

    T      = T_max / (1 + exp(-(V_pre - VP) / KP))
    dr/dt  = alpha * T * (1 - r) - beta * r
    I_syn  = g_max * r * (E_rev - V_post)

I_syn is added to the post-synaptic neuron's accumulator after every step.
The caller clears that accumulator once per tick, before any synapse writes.
"""

import logging

import numpy as np

from .base import (
    DEFAULT_DT, DEFAULT_UNCONNECTED_V, SYNAPSE_PRESETS,
    NeuronModel, SynapseParams, SynapseType,
)
from .exceptions import DanglingReferenceError, ModelReleasedError
from .integrator import RK4Integrator

logger = logging.getLogger(__name__)


class AmpaGabaaSynapse:
    """
    First-order kinetic synapse coupling two neurons.

    The synapse never owns the neurons it references. It reads ``voltage``
    from both and calls ``add_synaptic_current`` on the post-synaptic one.
    Until connected, both voltages read as -70 mV and no current is injected.
    """

    dimension = 1
    R = 0

    def __init__(self, synapse_type: SynapseType = SynapseType.AMPA,
                 neuron_model: NeuronModel = NeuronModel.IZHIKEVICH,
                 dt: float = DEFAULT_DT, params: SynapseParams = None):
        self.synapse_type = SynapseType(synapse_type)
        self.neuron_model = NeuronModel(neuron_model)

        preset = params or SYNAPSE_PRESETS[self.neuron_model][self.synapse_type]
        self.params = preset
        self.g_max = preset.g_max

        self.state = np.zeros(self.dimension, dtype=np.float64)
        self._t = 0.0
        self._i_syn = 0.0

        self.pre = None
        self.post = None

        self._integrator = RK4Integrator(
            AmpaGabaaSynapse._derivatives, self, self.dimension, dt)
        logger.debug("Created %s synapse for %s neurons",
                     self.synapse_type.name, self.neuron_model.name)

    # ------------------------------------------------------------------
    # Linkage
    # ------------------------------------------------------------------

    def connect(self, pre, post) -> bool:
        """
        Link the synapse between two live neurons.

        ``pre`` must expose ``voltage``; ``post`` must expose ``voltage`` and
        ``add_synaptic_current``. Returns False and leaves the synapse
        unchanged if either side is missing.
        """
        self._check_live()
        if pre is None or post is None:
            logger.warning("Refused synapse connection: missing neuron")
            return False
        if getattr(pre, 'released', False) or getattr(post, 'released', False):
            logger.warning("Refused synapse connection: neuron already freed")
            return False
        for neuron in (pre, post):
            if not hasattr(neuron, 'voltage'):
                logger.warning("Refused synapse connection: %r has no voltage", neuron)
                return False
        if not hasattr(post, 'add_synaptic_current'):
            logger.warning("Refused synapse connection: %r has no synaptic "
                           "current accumulator", post)
            return False

        self.pre = pre
        self.post = post
        return True

    def disconnect(self):
        self.pre = None
        self.post = None

    @property
    def connected(self) -> bool:
        return self.pre is not None and self.post is not None

    def _read_voltage(self, neuron) -> float:
        if neuron is None:
            return DEFAULT_UNCONNECTED_V
        self._check_linked(neuron)
        return neuron.voltage

    @staticmethod
    def _check_linked(neuron):
        if neuron is not None and getattr(neuron, 'released', False):
            raise DanglingReferenceError(
                f"Synapse references a freed {type(neuron).__name__}")

    # ------------------------------------------------------------------
    # Dynamics
    # ------------------------------------------------------------------

    @staticmethod
    def _derivatives(state: np.ndarray, out: np.ndarray, synapse: 'AmpaGabaaSynapse'):
        p = synapse.params
        r = state[0]
        v_pre = synapse._read_voltage(synapse.pre)

        t = p.t_max / (1.0 + np.exp(-(v_pre - p.VP) / p.KP))
        synapse._t = float(t)

        out[0] = p.alpha * t * (1.0 - r) - p.beta * r

    def update(self) -> float:
        """
        Advance r by one step and inject the resulting current.

        Returns the synaptic current computed for this step.
        """
        self._check_live()
        self._check_linked(self.pre)
        self._check_linked(self.post)
        self._integrator.step(self.state)

        v_post = self._read_voltage(self.post)
        i_syn = self.g_max * self.state[self.R] * (self.params.e_rev - v_post)
        self._i_syn = float(i_syn)

        if self.post is not None:
            self.post.add_synaptic_current(self._i_syn)

        return self._i_syn

    def set_max_conductance(self, g: float):
        """Set g_max, the synaptic weight."""
        self._check_live()
        self.g_max = float(g)

    # ------------------------------------------------------------------
    # Queries and lifecycle
    # ------------------------------------------------------------------

    def _check_live(self):
        if self._integrator is None:
            raise ModelReleasedError("AmpaGabaaSynapse used after free()")

    @property
    def released(self) -> bool:
        return self._integrator is None

    @property
    def synaptic_current(self) -> float:
        self._check_live()
        return self._i_syn

    @property
    def open_fraction(self) -> float:
        self._check_live()
        return float(self.state[self.R])

    @property
    def neurotransmitter(self) -> float:
        """Concentration T from the last derivative evaluation (mM)."""
        self._check_live()
        return self._t

    def free(self):
        """Drop the neuron references and release the integrator."""
        if self._integrator is None:
            return
        self.disconnect()
        self._integrator.free()
        self._integrator = None
        logger.debug("Released %s synapse", self.synapse_type.name)

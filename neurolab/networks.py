"""
Two-neuron circuit: a pre-synaptic neuron driving a post-synaptic neuron
through one AMPA or GABA-A synapse.

Per step the post-synaptic accumulator is cleared first, then the pre neuron,
the synapse and the post neuron are updated in that order, so the post neuron
integrates the current produced from the pre neuron's newest voltage.
"""

import logging
from dataclasses import dataclass

import numpy as np

from .base import DEFAULT_DT, FiringPattern, NeuronModel, SynapseType
from .neurons import NeuronBase, create_neuron
from .synapses import AmpaGabaaSynapse

logger = logging.getLogger(__name__)


@dataclass
class PairRecording:
    """Traces recorded by ``SynapticPair.run``."""
    time: np.ndarray
    v_pre: np.ndarray
    v_post: np.ndarray
    open_fraction: np.ndarray
    synaptic_current: np.ndarray


class SynapticPair:
    """
    Pre -> post neuron pair of the same model kind, coupled by one synapse.

    The pair owns both neurons and the synapse; ``free`` releases the synapse
    before the neurons it references.
    """

    def __init__(self, neuron_model: NeuronModel = NeuronModel.IZHIKEVICH,
                 synapse_type: SynapseType = SynapseType.AMPA,
                 g_max: float = 0.0, dt: float = DEFAULT_DT,
                 pattern: FiringPattern = FiringPattern.REGULAR_SPIKING):
        self.neuron_model = NeuronModel(neuron_model)
        self.dt = dt

        self.pre: NeuronBase = create_neuron(self.neuron_model, dt, pattern)
        self.post: NeuronBase = create_neuron(self.neuron_model, dt, pattern)

        self.synapse = AmpaGabaaSynapse(synapse_type, self.neuron_model, dt)
        self.synapse.set_max_conductance(g_max)
        self.synapse.connect(self.pre, self.post)

        self.time = 0.0

    def step(self, i_pre: float, i_post: float = 0.0):
        """
        Advance the whole circuit by one time step.

        Returns the (pre, post) samples reported by the neuron updates.
        """
        self.post.clear_synaptic_current()

        self.pre.set_external_current(i_pre)
        self.post.set_external_current(i_post)

        v_pre = self.pre.update()
        self.synapse.update()
        v_post = self.post.update()

        self.time += self.dt
        return v_pre, v_post

    def run(self, duration: float, i_pre: float, i_post: float = 0.0) -> PairRecording:
        """Simulate ``duration`` ms with constant drives and record every step."""
        n_steps = int(round(duration / self.dt))

        time = np.zeros(n_steps)
        v_pre = np.zeros(n_steps)
        v_post = np.zeros(n_steps)
        r = np.zeros(n_steps)
        i_syn = np.zeros(n_steps)

        logger.info("Running %s pair with %s synapse for %g ms (g_max=%g)",
                    self.neuron_model.name, self.synapse.synapse_type.name,
                    duration, self.synapse.g_max)

        for step in range(n_steps):
            time[step] = self.time
            v_pre[step], v_post[step] = self.step(i_pre, i_post)
            r[step] = self.synapse.open_fraction
            i_syn[step] = self.synapse.synaptic_current

        return PairRecording(time, v_pre, v_post, r, i_syn)

    def free(self):
        self.synapse.free()
        self.pre.free()
        self.post.free()

"""
Simulation orchestrator: ticks the active neuron and its synapses once per frame.

The orchestrator owns at most one live neuron model, the fixed-capacity
time-series buffers consumed by plotting, and the auto-scaled axis bounds.
The active neuron receives input from a presynaptic partner of the same
kind through one AMPA and one GABA-A synapse, weighted by the conductance
inputs. It is a two-state machine (stopped / running):

  - start:   reset, create the selected model and its synapses, run
  - pause:   toggle running without destroying the model
  - reset:   free synapses, then neurons, zero time and sample counter, stop
  - tick:    record one sample, or stop once the buffers are full
"""

import logging
from dataclasses import dataclass, fields
from typing import List, Optional

import numpy as np

from .base import (
    PLOT_DEFAULTS, FiringPattern, NeuronModel, PlotDefaults, SimulationParams,
    SynapseType,
)
from .neurons import HodgkinHuxleyNeuron, IzhikevichNeuron, NeuronBase, create_neuron
from .synapses import AmpaGabaaSynapse

logger = logging.getLogger(__name__)


# ============================================================================
# INPUTS, BUFFERS, AXIS BOUNDS
# ============================================================================

@dataclass
class SimulationInputs:
    """Values set by the presentation layer and read on every tick."""
    external_current: float = 0.0
    neuron_model: NeuronModel = NeuronModel.IZHIKEVICH
    firing_pattern: FiringPattern = FiringPattern.CHATTERING
    ampa_conductance: float = 0.0
    gabaa_conductance: float = 0.0


class PlotData:
    """
    Fixed-capacity (x, y) sample buffers, one row per accepted tick.

    Potential, gates and currents are stored against time; the Izhikevich
    phase buffer stores (u, v).
    """

    SERIES = (
        'membrane_potential', 'phase',
        'm_gate', 'h_gate', 'n_gate',
        'k_current', 'na_current', 'leak_current',
    )

    def __init__(self, capacity: int):
        self.capacity = capacity
        for name in self.SERIES:
            setattr(self, name, np.zeros((capacity, 2), dtype=np.float64))


@dataclass
class PlotBounds:
    """Axis limits for every plot, expanded as new samples arrive."""
    plot_x_min: float = 0.0
    plot_x_max: float = 0.0
    plot_y_min: float = 0.0
    plot_y_max: float = 0.0

    phase_x_min: float = 0.0
    phase_x_max: float = 0.0
    phase_y_min: float = 0.0
    phase_y_max: float = 0.0

    prob_y_min: float = 0.0
    prob_y_max: float = 0.0

    current_y_min: float = 0.0
    current_y_max: float = 0.0

    @classmethod
    def from_defaults(cls, defaults: PlotDefaults = PLOT_DEFAULTS) -> 'PlotBounds':
        bounds = cls()
        bounds.reset(defaults)
        return bounds

    def reset(self, defaults: PlotDefaults = PLOT_DEFAULTS):
        self.plot_x_min, self.plot_x_max = defaults.potential_x
        self.plot_y_min, self.plot_y_max = defaults.potential_y
        self.phase_x_min, self.phase_x_max = defaults.phase_x
        self.phase_y_min, self.phase_y_max = defaults.phase_y
        self.prob_y_min, self.prob_y_max = defaults.probability_y
        self.current_y_min, self.current_y_max = defaults.current_y

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# ============================================================================
# ORCHESTRATOR
# ============================================================================

class Simulation:
    """
    Single-neuron simulation driven one tick at a time.

    The run flag and model selector live in ``inputs`` and on this object so a
    render loop can flip them between ticks. Model handles are None whenever
    no run is in progress. Ticks follow the kind of the live model; a change
    of selector takes effect on the next start.
    """

    def __init__(self, params: SimulationParams = None,
                 inputs: SimulationInputs = None,
                 plot_defaults: PlotDefaults = None):
        self.params = params or SimulationParams()
        self.inputs = inputs or SimulationInputs()
        self.plot_defaults = plot_defaults or PLOT_DEFAULTS

        self.plot_data = PlotData(self.params.max_plot_points)
        self.plot_bounds = PlotBounds.from_defaults(self.plot_defaults)

        self.is_running = False
        self.current_time = 0.0
        self.sample_count = 0

        self.izhikevich_model: Optional[IzhikevichNeuron] = None
        self.hodgkin_huxley_model: Optional[HodgkinHuxleyNeuron] = None

        self.presynaptic_model: Optional[NeuronBase] = None
        self.ampa_synapse: Optional[AmpaGabaaSynapse] = None
        self.gabaa_synapse: Optional[AmpaGabaaSynapse] = None

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    @property
    def has_model(self) -> bool:
        return self.izhikevich_model is not None or self.hodgkin_huxley_model is not None

    @property
    def active_neuron(self) -> Optional[NeuronBase]:
        """The live neuron model, whichever kind it is."""
        if self.izhikevich_model is not None:
            return self.izhikevich_model
        return self.hodgkin_huxley_model

    @property
    def model_kind(self) -> NeuronModel:
        """Kind of the live model, or the selected kind when none exists."""
        neuron = self.active_neuron
        if neuron is not None:
            return neuron.kind
        return NeuronModel(self.inputs.neuron_model)

    @property
    def synapses(self) -> List[AmpaGabaaSynapse]:
        return [s for s in (self.ampa_synapse, self.gabaa_synapse) if s is not None]

    @property
    def is_full(self) -> bool:
        return self.sample_count >= self.plot_data.capacity

    def select_model(self, model: NeuronModel, pattern: FiringPattern = None) -> bool:
        """Change the model selection. Refused while a model exists."""
        if self.has_model:
            logger.warning("Model selection is locked while a simulation exists")
            return False
        self.inputs.neuron_model = NeuronModel(model)
        if pattern is not None:
            self.inputs.firing_pattern = FiringPattern(pattern)
        return True

    def start(self) -> bool:
        """
        Reset, then create the selected model, its presynaptic partner and
        both synapses, and start running.

        Returns False, with the simulation stopped and nothing allocated, if
        any of them could not be allocated.
        """
        self.reset()

        model = NeuronModel(self.inputs.neuron_model)
        dt = self.params.dt
        pattern = self.inputs.firing_pattern
        try:
            neuron = create_neuron(model, dt, pattern)
            if model == NeuronModel.IZHIKEVICH:
                self.izhikevich_model = neuron
            else:
                self.hodgkin_huxley_model = neuron
            self.presynaptic_model = create_neuron(model, dt, pattern)
            self.ampa_synapse = AmpaGabaaSynapse(SynapseType.AMPA, model, dt)
            self.gabaa_synapse = AmpaGabaaSynapse(SynapseType.GABA_A, model, dt)
        except MemoryError:
            logger.error("Could not allocate %s model", model.name)
            self._release_models()
            return False

        for synapse in self.synapses:
            synapse.connect(self.presynaptic_model, neuron)
        self._apply_conductances()

        self.is_running = True
        logger.info("Started %s simulation (dt=%g ms, capacity=%d)",
                    model.name, dt, self.plot_data.capacity)
        return True

    def toggle_pause(self) -> bool:
        """Pause or resume. Only valid once a model exists."""
        if not self.has_model:
            return False
        self.is_running = not self.is_running
        logger.info("Simulation %s at t=%.2f ms",
                    "resumed" if self.is_running else "paused", self.current_time)
        return True

    def reset(self):
        """Free synapses and models, zero time and counter, restore axis bounds."""
        if self.has_model:
            logger.info("Resetting simulation at t=%.2f ms", self.current_time)
        self.is_running = False
        self.current_time = 0.0
        self.sample_count = 0

        self._release_models()
        self.plot_bounds.reset(self.plot_defaults)

    def _release_models(self):
        # Synapses first: they reference the neurons
        for synapse in self.synapses:
            synapse.free()
        self.ampa_synapse = None
        self.gabaa_synapse = None

        for neuron in (self.presynaptic_model, self.izhikevich_model,
                       self.hodgkin_huxley_model):
            if neuron is not None:
                neuron.free()
        self.presynaptic_model = None
        self.izhikevich_model = None
        self.hodgkin_huxley_model = None

    # ------------------------------------------------------------------
    # Per-tick update
    # ------------------------------------------------------------------

    def tick(self) -> bool:
        """
        Advance the synapses and the active model by one step and record a
        sample.

        Returns True if a sample was recorded. A full buffer stops the run.
        """
        if not self.is_running:
            return False

        if self.is_full:
            self.is_running = False
            logger.info("Plot buffers full after %d samples (t=%.2f ms); stopping",
                        self.sample_count, self.current_time)
            return False

        neuron = self.active_neuron
        if neuron is None:
            logger.warning("No %s model to tick; stopping",
                           NeuronModel(self.inputs.neuron_model).name)
            self.is_running = False
            return False

        index = self.sample_count
        time = self.current_time

        self._drive_synapses(neuron)
        if neuron.kind == NeuronModel.IZHIKEVICH:
            self._step_izhikevich(neuron, index, time)
        else:
            self._step_hodgkin_huxley(neuron, index, time)

        self._update_auto_scale(neuron.kind, index, time)

        self.current_time += self.params.dt
        self.sample_count += 1
        return True

    def run(self, n_ticks: int) -> int:
        """Tick up to ``n_ticks`` times; returns the number of samples recorded."""
        recorded = 0
        for _ in range(n_ticks):
            if not self.tick():
                break
            recorded += 1
        return recorded

    def _apply_conductances(self):
        if self.ampa_synapse is not None:
            self.ampa_synapse.set_max_conductance(self.inputs.ampa_conductance)
        if self.gabaa_synapse is not None:
            self.gabaa_synapse.set_max_conductance(self.inputs.gabaa_conductance)

    def _drive_synapses(self, neuron: NeuronBase):
        """Clear the accumulator, step the presynaptic partner, then both synapses."""
        neuron.clear_synaptic_current()

        pre = self.presynaptic_model
        if pre is None:
            return
        pre.set_external_current(self.inputs.external_current)
        pre.update()

        self._apply_conductances()
        for synapse in self.synapses:
            synapse.update()

    def _step_izhikevich(self, neuron: IzhikevichNeuron, index: int, time: float):
        neuron.set_external_current(self.inputs.external_current)
        potential = neuron.update()
        recovery = neuron.recovery

        data = self.plot_data
        data.membrane_potential[index] = (time, potential)
        data.phase[index] = (recovery, potential)

    def _step_hodgkin_huxley(self, neuron: HodgkinHuxleyNeuron, index: int, time: float):
        neuron.set_external_current(self.inputs.external_current)
        potential = neuron.update()

        data = self.plot_data
        data.membrane_potential[index] = (time, potential)

        data.m_gate[index] = (time, neuron.m)
        data.h_gate[index] = (time, neuron.h)
        data.n_gate[index] = (time, neuron.n)

        data.k_current[index] = (time, neuron.i_k)
        data.na_current[index] = (time, neuron.i_na)
        data.leak_current[index] = (time, neuron.i_leak)

    def _update_auto_scale(self, kind: NeuronModel, index: int, time: float):
        b = self.plot_bounds
        data = self.plot_data
        margin = self.plot_defaults.potential_floor_margin

        # Time axis always follows the newest sample
        b.plot_x_max = time

        potential = data.membrane_potential[index, 1]
        if potential > b.plot_y_max:
            b.plot_y_max = potential
        if potential < b.plot_y_min:
            b.plot_y_min = potential - margin

        if kind == NeuronModel.IZHIKEVICH:
            recovery, v = data.phase[index]
            if recovery > b.phase_x_max:
                b.phase_x_max = recovery
            if recovery < b.phase_x_min:
                b.phase_x_min = recovery
            if v > b.phase_y_max:
                b.phase_y_max = v
            if v < b.phase_y_min:
                b.phase_y_min = v - margin
        else:
            floor = self.plot_defaults.current_floor_margin
            for series in (data.k_current, data.na_current, data.leak_current):
                value = series[index, 1]
                if value > b.current_y_max:
                    b.current_y_max = value
                if value < b.current_y_min:
                    b.current_y_min = value - floor

    # ------------------------------------------------------------------
    # Accessors for consumers
    # ------------------------------------------------------------------

    def samples(self, series: str) -> np.ndarray:
        """View of the recorded rows of one buffer (no copy)."""
        if series not in PlotData.SERIES:
            raise KeyError(f"Unknown series {series!r}")
        return getattr(self.plot_data, series)[:self.sample_count]

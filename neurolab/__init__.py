"""
NeuroLab: single-neuron electrophysiology simulator.

Hodgkin-Huxley and Izhikevich neurons integrated with fixed-step RK4, an
AMPA/GABA-A kinetic synapse, and a tick-driven orchestrator that records
plot buffers for a presentation layer.
"""

# Configuration and presets
from .base import (
    DEFAULT_DT,
    MAX_PLOT_POINTS,
    IZHIKEVICH_SPIKE_PEAK,
    NeuronModel,
    FiringPattern,
    SynapseType,
    HodgkinHuxleyParams,
    IzhikevichParams,
    SynapseParams,
    SimulationParams,
    PlotDefaults,
    SliderParams,
    HH_CONFIG,
    IZHIKEVICH_PRESETS,
    SYNAPSE_PRESETS,
    PLOT_DEFAULTS,
    SLIDER,
)

from .exceptions import NeuroLabError, ModelReleasedError, DanglingReferenceError

# Numerical core
from .integrator import RK4Integrator
from .neurons import NeuronBase, HodgkinHuxleyNeuron, IzhikevichNeuron, create_neuron
from .synapses import AmpaGabaaSynapse

# Orchestration
from .simulation import Simulation, SimulationInputs, PlotData, PlotBounds
from .networks import SynapticPair, PairRecording

# Visualization
from .visualization import plot_simulation, plot_synaptic_pair

from . import log

__version__ = "1.0.0"
__all__ = [
    # Configuration
    "DEFAULT_DT", "MAX_PLOT_POINTS", "IZHIKEVICH_SPIKE_PEAK",
    "NeuronModel", "FiringPattern", "SynapseType",
    "HodgkinHuxleyParams", "IzhikevichParams", "SynapseParams",
    "SimulationParams", "PlotDefaults", "SliderParams",
    "HH_CONFIG", "IZHIKEVICH_PRESETS", "SYNAPSE_PRESETS", "PLOT_DEFAULTS", "SLIDER",
    # Errors
    "NeuroLabError", "ModelReleasedError", "DanglingReferenceError",
    # Core
    "RK4Integrator", "NeuronBase", "HodgkinHuxleyNeuron", "IzhikevichNeuron",
    "create_neuron", "AmpaGabaaSynapse",
    # Orchestration
    "Simulation", "SimulationInputs", "PlotData", "PlotBounds",
    "SynapticPair", "PairRecording",
    "plot_simulation", "plot_synaptic_pair",
    "log",
]

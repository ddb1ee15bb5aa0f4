"""
Shared data structures, parameters, and preset tables.

All parameter dataclasses, enumerations, and constants used across the package.

Parameter values are sourced from established neuroscience literature:
  - Hodgkin & Huxley (1952): Ion channel dynamics (squid giant axon), with
    capacitance and conductances scaled by membrane area (Silva, UFAL 2023,
    Table 1), hence the factors of pi
  - Izhikevich (2003): "Simple model of spiking neurons", firing-pattern presets
  - Destexhe, Mainen & Sejnowski (1994): AMPA/GABA-A kinetic synapse
"""

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict


# ============================================================================
# CONSTANTS
# ============================================================================

DEFAULT_DT = 0.01             # Integration time step (ms)
MAX_PLOT_POINTS = 50001       # Samples per run: duration = (points - 1) * dt
IZHIKEVICH_SPIKE_PEAK = 30.0  # Spike cut-off for the Izhikevich reset (mV)
T_MAX = 1.0                   # Peak neurotransmitter concentration (mM)
DEFAULT_UNCONNECTED_V = -70.0 # Voltage read by an unconnected synapse (mV)


# ============================================================================
# ENUMERATIONS
# ============================================================================

class NeuronModel(IntEnum):
    """Neuron model implementations selectable by the orchestrator."""
    IZHIKEVICH = 0
    HODGKIN_HUXLEY = 1


class FiringPattern(IntEnum):
    """Canonical Izhikevich firing patterns."""
    CHATTERING = 0
    FAST_SPIKING = 1
    INTRINSICALLY_BURSTING = 2
    LOW_THRESHOLD_SPIKING = 3
    REGULAR_SPIKING = 4
    RESONATOR = 5
    THALAMO_CORTICAL = 6


class SynapseType(IntEnum):
    """Receptor type of a kinetic synapse."""
    AMPA = 0      # Excitatory
    GABA_A = 1    # Inhibitory


# ============================================================================
# NEURON PARAMETERS
# ============================================================================

@dataclass(frozen=True)
class HodgkinHuxleyParams:
    """
    Hodgkin-Huxley parameters in the 1952 convention.

    Voltages are displacements from rest, so the resting potential is 0 mV and
    the leak reversal (10.6 mV) is chosen to make rest a fixed point.
    """
    resting_potential: float = 0.0          # mV
    C: float = 9.0 * math.pi                # Membrane capacitance
    e_leak: float = 10.6                    # Leak reversal (mV)
    e_na: float = 115.0                     # Sodium reversal (mV)
    e_k: float = -12.0                      # Potassium reversal (mV)
    g_leak: float = 2.7 * math.pi           # Leak conductance
    g_na: float = 1080.0 * math.pi          # Sodium max conductance
    g_k: float = 324.0 * math.pi            # Potassium max conductance


@dataclass(frozen=True)
class IzhikevichParams:
    """
    Izhikevich (2003) parameters.

    a: time scale of the recovery variable u
    b: sensitivity of u to sub-threshold v
    c: after-spike reset value of v (mV)
    d: after-spike increment of u
    """
    a: float
    b: float
    c: float
    d: float


HH_CONFIG = HodgkinHuxleyParams()

IZHIKEVICH_PRESETS: Dict[FiringPattern, IzhikevichParams] = {
    FiringPattern.CHATTERING:             IzhikevichParams(a=0.02, b=0.20, c=-50.0, d=2.0),
    FiringPattern.FAST_SPIKING:           IzhikevichParams(a=0.10, b=0.20, c=-65.0, d=2.0),
    FiringPattern.INTRINSICALLY_BURSTING: IzhikevichParams(a=0.02, b=0.20, c=-55.0, d=4.0),
    FiringPattern.LOW_THRESHOLD_SPIKING:  IzhikevichParams(a=0.02, b=0.25, c=-65.0, d=2.0),
    FiringPattern.REGULAR_SPIKING:        IzhikevichParams(a=0.02, b=0.20, c=-65.0, d=8.0),
    FiringPattern.RESONATOR:              IzhikevichParams(a=0.10, b=0.26, c=-60.0, d=-1.0),
    FiringPattern.THALAMO_CORTICAL:       IzhikevichParams(a=0.02, b=0.25, c=-65.0, d=0.05),
}


# ============================================================================
# SYNAPSE PARAMETERS
# ============================================================================

@dataclass(frozen=True)
class SynapseParams:
    """
    Kinetic synapse parameters (Destexhe et al. 1994).

    Release: T = T_max / (1 + exp(-(V_pre - VP) / KP))
    Gating:  dr/dt = alpha * T * (1 - r) - beta * r
    Current: I_syn = g_max * r * (E_rev - V_post)
    """
    KP: float                 # Steepness of the release sigmoid (mV)
    VP: float                 # Midpoint of the release sigmoid (mV)
    alpha: float              # Connection rate (1/(mM ms))
    beta: float               # Disconnection rate (1/ms)
    e_rev: float              # Reversal potential (mV)
    g_max: float = 0.0        # Max conductance; 0 until set by the caller
    t_max: float = T_MAX


# Izhikevich neurons: sigmoid midpoint near the spike cut-off, faster AMPA decay
IZ_SYNAPSE_CONFIG: Dict[SynapseType, SynapseParams] = {
    SynapseType.AMPA:   SynapseParams(KP=5.0, VP=2.0, alpha=1.1, beta=0.30, e_rev=0.0),
    SynapseType.GABA_A: SynapseParams(KP=5.0, VP=2.0, alpha=5.0, beta=0.18, e_rev=-80.0),
}

# Hodgkin-Huxley neurons: VP and AMPA reversal shifted for the 1952 voltage range
HH_SYNAPSE_CONFIG: Dict[SynapseType, SynapseParams] = {
    SynapseType.AMPA:   SynapseParams(KP=5.0, VP=62.0, alpha=1.1, beta=0.19, e_rev=60.0),
    SynapseType.GABA_A: SynapseParams(KP=5.0, VP=62.0, alpha=5.0, beta=0.18, e_rev=-80.0),
}

SYNAPSE_PRESETS: Dict[NeuronModel, Dict[SynapseType, SynapseParams]] = {
    NeuronModel.IZHIKEVICH: IZ_SYNAPSE_CONFIG,
    NeuronModel.HODGKIN_HUXLEY: HH_SYNAPSE_CONFIG,
}


# ============================================================================
# SIMULATION / PRESENTATION PARAMETERS
# ============================================================================

@dataclass
class SimulationParams:
    """Global simulation parameters."""
    dt: float = DEFAULT_DT                  # Time step (ms)
    max_plot_points: int = MAX_PLOT_POINTS  # Buffer capacity per run


@dataclass(frozen=True)
class PlotDefaults:
    """Initial axis bounds restored on every reset."""
    potential_x: tuple = (0.0, 200.0)
    potential_y: tuple = (-80.0, 40.0)
    phase_x: tuple = (-12.0, -10.0)
    phase_y: tuple = (-80.0, 40.0)
    probability_y: tuple = (0.0, 1.0)
    current_y: tuple = (-20.0, 20.0)

    # Padding applied when a new minimum is observed
    potential_floor_margin: float = 2.0
    current_floor_margin: float = 10000.0


@dataclass(frozen=True)
class SliderParams:
    """External current range offered to the user."""
    current_min: float = 0.0
    current_max: float = 500.0
    step: float = 0.01

    def clamp(self, value: float) -> float:
        return min(max(value, self.current_min), self.current_max)


PLOT_DEFAULTS = PlotDefaults()
SLIDER = SliderParams()

"""
Plotting of recorded simulation buffers.

  - plot_simulation: membrane potential plus phase plot (Izhikevich) or
    gates and ionic currents (Hodgkin-Huxley), framed by the orchestrator's
    auto-scaled axis bounds
  - plot_synaptic_pair: pre/post voltages, open-channel fraction and current
"""

import matplotlib.pyplot as plt

from .base import NeuronModel


def _finish(fig, save_path, show):
    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150)
        print(f"Figure saved to: {save_path}")
    if show:
        plt.show()
    return fig


def plot_simulation(sim, save_path: str = None, show: bool = True):
    """Visualise the samples recorded so far by a ``Simulation``."""
    b = sim.plot_bounds
    potential = sim.samples('membrane_potential')
    is_izhikevich = sim.model_kind == NeuronModel.IZHIKEVICH

    n_rows = 2 if is_izhikevich else 3
    fig, axes = plt.subplots(n_rows, 1, figsize=(12, 4 * n_rows))

    # Membrane potential
    ax = axes[0]
    ax.plot(potential[:, 0], potential[:, 1], 'k-', linewidth=1)
    ax.set_xlim(b.plot_x_min, max(b.plot_x_max, b.plot_x_min + sim.params.dt))
    ax.set_ylim(b.plot_y_min, b.plot_y_max)
    ax.set_xlabel('Time (ms)')
    ax.set_ylabel('Membrane Potential (mV)')
    ax.set_title('Membrane Potential')
    ax.grid(True, alpha=0.3)

    if is_izhikevich:
        # Phase plane: recovery u against potential v
        phase = sim.samples('phase')
        ax = axes[1]
        ax.plot(phase[:, 0], phase[:, 1], 'b-', linewidth=1)
        ax.set_xlim(b.phase_x_min, b.phase_x_max)
        ax.set_ylim(b.phase_y_min, b.phase_y_max)
        ax.set_xlabel('Recovery u')
        ax.set_ylabel('Potential v (mV)')
        ax.set_title('Phase Plot')
        ax.grid(True, alpha=0.3)
        return _finish(fig, save_path, show)

    # Gating variables
    ax = axes[1]
    for series, style, label in (('m_gate', 'r-', 'm (Na activation)'),
                                 ('h_gate', 'b-', 'h (Na inactivation)'),
                                 ('n_gate', 'g-', 'n (K activation)')):
        data = sim.samples(series)
        ax.plot(data[:, 0], data[:, 1], style, label=label, linewidth=1.2)
    ax.set_ylim(b.prob_y_min, b.prob_y_max)
    ax.set_ylabel('Gate Value (0-1)')
    ax.set_title('Ion Channel Gating Variables')
    ax.legend()
    ax.grid(True, alpha=0.3)

    # Ionic currents
    ax = axes[2]
    for series, style, label in (('na_current', 'r-', 'I_Na'),
                                 ('k_current', 'g-', 'I_K'),
                                 ('leak_current', 'b-', 'I_L')):
        data = sim.samples(series)
        ax.plot(data[:, 0], data[:, 1], style, label=label, linewidth=1, alpha=0.8)
    ax.set_ylim(b.current_y_min, b.current_y_max)
    ax.set_xlabel('Time (ms)')
    ax.set_ylabel('Current')
    ax.set_title('Ionic Currents')
    ax.legend()
    ax.grid(True, alpha=0.3)

    return _finish(fig, save_path, show)


def plot_synaptic_pair(recording, title: str = 'Synaptic Pair',
                       save_path: str = None, show: bool = True):
    """Visualise a ``PairRecording``: voltages, open fraction, synaptic current."""
    fig, axes = plt.subplots(3, 1, figsize=(12, 10), sharex=True)

    ax = axes[0]
    ax.plot(recording.time, recording.v_pre, 'k-', label='Pre-synaptic', linewidth=1)
    ax.plot(recording.time, recording.v_post, 'r-', label='Post-synaptic', linewidth=1)
    ax.set_ylabel('Membrane Potential (mV)')
    ax.set_title(title)
    ax.legend()
    ax.grid(True, alpha=0.3)

    ax = axes[1]
    ax.plot(recording.time, recording.open_fraction, 'b-', linewidth=1.2)
    ax.set_ylim(0.0, 1.0)
    ax.set_ylabel('Open Fraction r')
    ax.grid(True, alpha=0.3)

    ax = axes[2]
    ax.plot(recording.time, recording.synaptic_current, 'g-', linewidth=1)
    ax.set_xlabel('Time (ms)')
    ax.set_ylabel('I_syn')
    ax.grid(True, alpha=0.3)

    return _finish(fig, save_path, show)

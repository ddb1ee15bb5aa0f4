"""
Example 01: Hodgkin-Huxley Action Potentials

Runs the single-neuron simulation with the Hodgkin-Huxley model under a
constant injected current and plots the membrane potential, gating
variables and ionic currents with their auto-scaled axes.

Level: Beginner
Runtime: ~10 seconds
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from neurolab.base import SLIDER, NeuronModel, SimulationParams
from neurolab.simulation import Simulation, SimulationInputs
from neurolab.visualization import plot_simulation


def main():
    print("=== Example 01: Hodgkin-Huxley Action Potentials ===\n")

    current = SLIDER.clamp(300.0)
    duration = 50.0     # ms
    params = SimulationParams()
    sim = Simulation(params, SimulationInputs(external_current=current,
                                              neuron_model=NeuronModel.HODGKIN_HUXLEY))

    if not sim.start():
        print("Could not start the simulation")
        return

    n_ticks = int(duration / params.dt)
    recorded = sim.run(n_ticks)
    print(f"Recorded {recorded} samples ({sim.current_time:.2f} ms) at I = {current}")

    voltages = sim.samples('membrane_potential')[:, 1]
    crossings = ((voltages[1:] >= 50.0) & (voltages[:-1] < 50.0)).sum()
    print(f"Peak potential: {voltages.max():.1f} mV, {crossings} action potentials")

    b = sim.plot_bounds
    print(f"Current axis: [{b.current_y_min:.1f}, {b.current_y_max:.1f}]")

    plot_simulation(sim, save_path='01_hodgkin_huxley_results.png')
    sim.reset()


if __name__ == "__main__":
    main()

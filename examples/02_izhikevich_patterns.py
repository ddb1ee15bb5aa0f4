"""
Example 02: Izhikevich Firing Patterns

Drives each Izhikevich preset with the same current, reports spike counts,
then shows the voltage trace and (u, v) phase plot for one pattern.

Level: Beginner
Runtime: ~20 seconds
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from neurolab.base import IZHIKEVICH_SPIKE_PEAK, SLIDER, FiringPattern, NeuronModel
from neurolab.simulation import Simulation, SimulationInputs
from neurolab.visualization import plot_simulation


def main():
    print("=== Example 02: Izhikevich Firing Patterns ===\n")

    current = SLIDER.clamp(10.0)
    n_ticks = 20000     # 200 ms at dt = 0.01

    sim = Simulation(inputs=SimulationInputs(external_current=current))

    for pattern in FiringPattern:
        sim.reset()
        sim.select_model(NeuronModel.IZHIKEVICH, pattern)
        sim.start()
        sim.run(n_ticks)

        voltages = sim.samples('membrane_potential')[:, 1]
        spikes = (voltages == IZHIKEVICH_SPIKE_PEAK).sum()
        print(f"  {pattern.name:<20s} {spikes:3d} spikes in {sim.current_time:.0f} ms")

    # Chattering in detail
    sim.reset()
    sim.select_model(NeuronModel.IZHIKEVICH, FiringPattern.CHATTERING)
    sim.start()
    sim.run(n_ticks)

    plot_simulation(sim, save_path='02_izhikevich_patterns_results.png')
    sim.reset()


if __name__ == "__main__":
    main()

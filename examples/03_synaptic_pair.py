"""
Example 03: Excitatory and Inhibitory Synapses

Couples two neurons through an AMPA or a GABA-A synapse and compares how the
post-synaptic neuron responds when only the pre-synaptic neuron is driven.

Level: Intermediate
Runtime: ~15 seconds
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from neurolab.base import NeuronModel, SynapseType
from neurolab.networks import SynapticPair
from neurolab.visualization import plot_synaptic_pair


def main():
    print("=== Example 03: Excitatory and Inhibitory Synapses ===\n")

    duration = 50.0     # ms

    # Hodgkin-Huxley pair through AMPA
    pair = SynapticPair(NeuronModel.HODGKIN_HUXLEY, SynapseType.AMPA, g_max=5.0)
    rec = pair.run(duration, i_pre=300.0)
    print("HH + AMPA:")
    print(f"  Pre peak:  {rec.v_pre.max():.1f} mV")
    print(f"  Post peak: {rec.v_post.max():.1f} mV")
    print(f"  Max open fraction: {rec.open_fraction.max():.3f}")
    plot_synaptic_pair(rec, title='Hodgkin-Huxley pair, AMPA synapse',
                       save_path='03_hh_ampa_results.png')
    pair.free()

    # Izhikevich pair through GABA-A, post neuron driven as well
    pair = SynapticPair(NeuronModel.IZHIKEVICH, SynapseType.GABA_A, g_max=1.0)
    rec = pair.run(duration, i_pre=10.0, i_post=10.0)
    print("\nIzhikevich + GABA-A:")
    print(f"  Pre spikes:  {(rec.v_pre == 30.0).sum()}")
    print(f"  Post spikes: {(rec.v_post == 30.0).sum()}")
    print(f"  Strongest inhibition: {rec.synaptic_current.min():.2f}")
    plot_synaptic_pair(rec, title='Izhikevich pair, GABA-A synapse',
                       save_path='03_iz_gabaa_results.png')
    pair.free()


if __name__ == "__main__":
    main()

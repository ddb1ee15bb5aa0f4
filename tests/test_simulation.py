"""
Tests for the simulation orchestrator.
"""

import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import neurolab.simulation as simulation_module
from neurolab.base import (
    HH_CONFIG, IZHIKEVICH_SPIKE_PEAK, MAX_PLOT_POINTS, PLOT_DEFAULTS,
    FiringPattern, NeuronModel, SimulationParams, SynapseType,
)
from neurolab.neurons import IzhikevichNeuron
from neurolab.simulation import PlotBounds, Simulation, SimulationInputs


def make_simulation(model=NeuronModel.IZHIKEVICH, capacity=MAX_PLOT_POINTS,
                    current=0.0, pattern=FiringPattern.REGULAR_SPIKING):
    inputs = SimulationInputs(external_current=current, neuron_model=model,
                              firing_pattern=pattern)
    return Simulation(SimulationParams(dt=0.01, max_plot_points=capacity), inputs)


class TestSimulationLifecycle:
    """Start, pause and reset transitions."""

    def test_initial_state(self):
        """A new simulation is stopped with no model and empty buffers."""
        sim = Simulation()
        assert not sim.is_running
        assert sim.sample_count == 0
        assert sim.current_time == 0.0
        assert sim.izhikevich_model is None
        assert sim.hodgkin_huxley_model is None
        assert sim.plot_data.capacity == MAX_PLOT_POINTS == 50001
        assert sim.params.dt == 0.01

    def test_start_creates_selected_model(self):
        """start() allocates only the selected model and runs."""
        sim = make_simulation(NeuronModel.HODGKIN_HUXLEY)
        assert sim.start()

        assert sim.is_running
        assert sim.hodgkin_huxley_model is not None
        assert sim.izhikevich_model is None
        assert sim.active_neuron is sim.hodgkin_huxley_model

    def test_start_uses_firing_pattern(self):
        """The Izhikevich model is built from the selected firing pattern."""
        sim = make_simulation(pattern=FiringPattern.RESONATOR)
        sim.start()
        assert sim.izhikevich_model.pattern == FiringPattern.RESONATOR

    def test_start_restarts_from_scratch(self):
        """Starting again discards the previous run."""
        sim = make_simulation()
        sim.start()
        first = sim.izhikevich_model
        sim.run(10)

        sim.start()
        assert first.released
        assert sim.sample_count == 0
        assert sim.izhikevich_model is not first

    def test_start_reports_allocation_failure(self, monkeypatch, caplog):
        """If the model cannot be allocated the simulation stays stopped."""
        def fail(*args, **kwargs):
            raise MemoryError

        monkeypatch.setattr(simulation_module, "create_neuron", fail)
        sim = make_simulation()

        assert sim.start() is False
        assert not sim.is_running
        assert not sim.has_model
        assert "Could not allocate IZHIKEVICH model" in caplog.text

    def test_pause_requires_model(self):
        """Pausing does nothing before a model exists."""
        sim = Simulation()
        assert sim.toggle_pause() is False
        assert not sim.is_running

    def test_pause_and_resume(self):
        """Pausing keeps the model and stops time; resuming continues."""
        sim = make_simulation()
        sim.start()
        sim.run(5)
        model = sim.izhikevich_model

        assert sim.toggle_pause()
        assert not sim.is_running
        assert sim.tick() is False
        assert sim.sample_count == 5
        assert sim.izhikevich_model is model

        assert sim.toggle_pause()
        assert sim.tick()
        assert sim.sample_count == 6

    def test_reset(self):
        """reset() frees the model and zeroes time, counter and run flag."""
        sim = make_simulation(current=10.0)
        sim.start()
        sim.run(250)
        model = sim.izhikevich_model

        sim.reset()
        assert sim.sample_count == 0
        assert sim.current_time == 0.0
        assert not sim.is_running
        assert sim.izhikevich_model is None
        assert sim.hodgkin_huxley_model is None
        assert model.released

    def test_tick_after_reset_is_noop(self):
        """Ticking a reset simulation neither crashes nor advances time."""
        sim = make_simulation()
        sim.start()
        sim.run(20)
        sim.reset()

        for _ in range(10):
            assert sim.tick() is False
        assert sim.current_time == 0.0
        assert sim.sample_count == 0

    def test_model_selection_locked_while_started(self):
        """The model selector is only honoured when no model exists."""
        sim = Simulation()
        assert sim.select_model(NeuronModel.HODGKIN_HUXLEY)
        sim.start()

        assert sim.select_model(NeuronModel.IZHIKEVICH) is False
        assert sim.inputs.neuron_model == NeuronModel.HODGKIN_HUXLEY

        sim.reset()
        assert sim.select_model(NeuronModel.IZHIKEVICH, FiringPattern.FAST_SPIKING)
        assert sim.inputs.firing_pattern == FiringPattern.FAST_SPIKING

    def test_selector_change_mid_run_keeps_live_model(self):
        """Changing the selector during a run keeps ticking the live model."""
        sim = make_simulation()
        sim.start()
        sim.tick()

        sim.inputs.neuron_model = NeuronModel.HODGKIN_HUXLEY
        assert sim.tick()
        assert sim.is_running
        assert sim.sample_count == 2
        assert sim.model_kind == NeuronModel.IZHIKEVICH
        assert sim.samples('phase')[1, 0] == sim.izhikevich_model.recovery

        sim.reset()
        assert sim.model_kind == NeuronModel.HODGKIN_HUXLEY
        assert sim.start()
        assert sim.active_neuron is sim.hodgkin_huxley_model


class TestSimulationRecording:
    """Per-tick sampling into plot buffers."""

    def test_izhikevich_samples(self):
        """Each tick records (t, v) and the phase pair (u, v)."""
        sim = make_simulation(current=5.0)
        sim.start()
        sim.tick()
        sim.tick()

        potential = sim.samples('membrane_potential')
        phase = sim.samples('phase')
        assert potential.shape == (2, 2)
        assert potential[0, 0] == 0.0
        assert potential[1, 0] == pytest.approx(0.01)
        assert phase[1, 0] == sim.izhikevich_model.recovery
        assert phase[1, 1] == potential[1, 1]
        assert sim.izhikevich_model.i_ext == 5.0
        assert sim.current_time == pytest.approx(0.02)

    def test_izhikevich_spike_recorded_at_peak(self):
        """A spike shows in the buffer as the 30 mV peak."""
        sim = make_simulation(current=10.0)
        sim.start()
        sim.run(1000)

        voltages = sim.samples('membrane_potential')[:, 1]
        assert voltages.max() == IZHIKEVICH_SPIKE_PEAK

    def test_hodgkin_huxley_samples(self):
        """HH ticks fill gate and current buffers consistent with the model."""
        sim = make_simulation(NeuronModel.HODGKIN_HUXLEY, current=300.0)
        sim.start()
        sim.run(2000)

        neuron = sim.hodgkin_huxley_model
        assert sim.samples('m_gate')[-1, 1] == neuron.m
        assert sim.samples('h_gate')[-1, 1] == neuron.h
        assert sim.samples('n_gate')[-1, 1] == neuron.n
        assert sim.samples('k_current')[-1, 1] == neuron.i_k
        assert sim.samples('na_current')[-1, 1] == neuron.i_na
        assert sim.samples('leak_current')[-1, 1] == neuron.i_leak
        assert sim.samples('membrane_potential')[:, 1].max() > 80.0

    def test_unknown_series(self):
        """Asking for a series that does not exist raises KeyError."""
        with pytest.raises(KeyError):
            Simulation(SimulationParams(max_plot_points=10)).samples('voltage')


class TestSynapticInput:
    """Presynaptic partner and AMPA / GABA-A synapses onto the active neuron."""

    def test_start_wires_synapses(self):
        """start() builds a partner of the same kind and connects both synapses to it."""
        sim = make_simulation(NeuronModel.HODGKIN_HUXLEY)
        sim.start()

        pre = sim.presynaptic_model
        assert pre.kind == NeuronModel.HODGKIN_HUXLEY
        assert pre is not sim.active_neuron
        for synapse, syn_type in ((sim.ampa_synapse, SynapseType.AMPA),
                                  (sim.gabaa_synapse, SynapseType.GABA_A)):
            assert synapse.synapse_type == syn_type
            assert synapse.neuron_model == NeuronModel.HODGKIN_HUXLEY
            assert synapse.pre is pre
            assert synapse.post is sim.active_neuron

    def test_zero_conductance_matches_isolated_neuron(self):
        """With both conductances at zero the recording equals a lone neuron's."""
        sim = make_simulation(current=10.0)
        sim.start()
        sim.run(500)

        lone = IzhikevichNeuron(FiringPattern.REGULAR_SPIKING, 0.01)
        lone.set_external_current(10.0)
        expected = [lone.update() for _ in range(500)]

        assert list(sim.samples('membrane_potential')[:, 1]) == expected

    def test_partner_receives_external_current(self):
        """The presynaptic partner is driven by the same external current."""
        sim = make_simulation(current=7.5)
        sim.start()
        sim.tick()
        assert sim.presynaptic_model.i_ext == 7.5

    def test_ampa_depolarises(self):
        """AMPA input pushes the resting HH neuron upwards."""
        sim = make_simulation(NeuronModel.HODGKIN_HUXLEY)
        sim.inputs.ampa_conductance = 5.0
        sim.start()
        sim.run(200)

        neuron = sim.active_neuron
        assert sim.ampa_synapse.open_fraction > 0.0
        assert neuron.synaptic_current > 0.0
        assert neuron.voltage > HH_CONFIG.resting_potential

    def test_gabaa_hyperpolarises(self):
        """GABA-A input pulls the resting HH neuron downwards."""
        sim = make_simulation(NeuronModel.HODGKIN_HUXLEY)
        sim.inputs.gabaa_conductance = 5.0
        sim.start()
        sim.run(200)

        neuron = sim.active_neuron
        assert neuron.synaptic_current < 0.0
        assert neuron.voltage < HH_CONFIG.resting_potential

    def test_accumulator_cleared_each_tick(self):
        """After a tick the neuron holds exactly this tick's synaptic currents."""
        sim = make_simulation(current=10.0)
        sim.inputs.ampa_conductance = 1.0
        sim.inputs.gabaa_conductance = 0.5
        sim.start()

        for _ in range(50):
            sim.tick()
            total = sim.ampa_synapse.synaptic_current + sim.gabaa_synapse.synaptic_current
            assert sim.active_neuron.synaptic_current == total

    def test_conductance_changes_apply_mid_run(self):
        """Conductance inputs are re-read on every tick."""
        sim = make_simulation()
        sim.start()
        sim.tick()
        assert sim.ampa_synapse.g_max == 0.0

        sim.inputs.ampa_conductance = 2.0
        sim.inputs.gabaa_conductance = 3.0
        sim.tick()
        assert sim.ampa_synapse.g_max == 2.0
        assert sim.gabaa_synapse.g_max == 3.0

    def test_reset_frees_synapses_before_neurons(self, monkeypatch):
        """Synapses are released before the neurons they reference."""
        sim = make_simulation()
        sim.start()
        sim.run(10)

        released = []
        parts = {
            'ampa': sim.ampa_synapse, 'gabaa': sim.gabaa_synapse,
            'pre': sim.presynaptic_model, 'post': sim.izhikevich_model,
        }
        for name, part in parts.items():
            def free(part=part, name=name, original=part.free):
                released.append(name)
                original()
            monkeypatch.setattr(part, 'free', free)

        sim.reset()
        assert sorted(released[:2]) == ['ampa', 'gabaa']
        assert sorted(released[2:]) == ['post', 'pre']
        assert all(part.released for part in parts.values())
        assert sim.ampa_synapse is None
        assert sim.gabaa_synapse is None
        assert sim.presynaptic_model is None

    def test_partial_allocation_failure_releases_neurons(self, monkeypatch):
        """If a synapse cannot be allocated the neurons already built are freed."""
        created = []
        real_create = simulation_module.create_neuron

        def recording_create(*args, **kwargs):
            neuron = real_create(*args, **kwargs)
            created.append(neuron)
            return neuron

        def fail(*args, **kwargs):
            raise MemoryError

        monkeypatch.setattr(simulation_module, "create_neuron", recording_create)
        monkeypatch.setattr(simulation_module, "AmpaGabaaSynapse", fail)
        sim = make_simulation()

        assert sim.start() is False
        assert len(created) == 2
        assert all(neuron.released for neuron in created)
        assert not sim.has_model
        assert sim.presynaptic_model is None


class TestBufferCapacity:
    """Buffer-full termination."""

    def test_stops_on_tick_past_capacity(self):
        """All capacity ticks record; the next one stops the run."""
        sim = make_simulation(capacity=50)
        sim.start()

        assert sim.run(50) == 50
        assert sim.is_running
        assert sim.sample_count == 50

        assert sim.tick() is False
        assert not sim.is_running
        assert sim.sample_count == 50

    def test_default_capacity_run(self):
        """A full default-length run records exactly 50001 samples."""
        sim = make_simulation(current=10.0)
        sim.start()

        recorded = sim.run(MAX_PLOT_POINTS + 10)
        assert recorded == 50001
        assert not sim.is_running
        assert sim.samples('membrane_potential')[-1, 0] == pytest.approx(500.0)


class TestPlotBounds:
    """Auto-scaling of axis bounds."""

    def test_defaults(self):
        """Bounds start from the default table."""
        bounds = Simulation().plot_bounds
        assert (bounds.plot_x_min, bounds.plot_x_max) == (0.0, 200.0)
        assert (bounds.plot_y_min, bounds.plot_y_max) == (-80.0, 40.0)
        assert (bounds.phase_x_min, bounds.phase_x_max) == (-12.0, -10.0)
        assert (bounds.prob_y_min, bounds.prob_y_max) == (0.0, 1.0)
        assert (bounds.current_y_min, bounds.current_y_max) == (-20.0, 20.0)

    def test_izhikevich_expansion(self):
        """Time axis follows the newest sample; phase bounds grow to fit."""
        sim = make_simulation(current=10.0)
        sim.start()
        sim.run(1000)

        b = sim.plot_bounds
        potential = sim.samples('membrane_potential')
        phase = sim.samples('phase')

        assert b.plot_x_max == potential[-1, 0]
        assert b.plot_y_max == PLOT_DEFAULTS.potential_y[1]
        assert b.phase_x_min == phase[:, 0].min()
        assert b.phase_x_max >= phase[:, 0].max()
        assert b.phase_y_min <= phase[:, 1].min()

    def test_time_axis_tracks_latest_sample(self):
        """The time axis maximum is the time of the newest sample, even at t = 0."""
        sim = make_simulation()
        sim.start()
        sim.tick()
        assert sim.plot_bounds.plot_x_max == 0.0
        assert sim.plot_bounds.phase_x_min == sim.samples('phase')[0, 0]

        sim.tick()
        assert sim.plot_bounds.plot_x_max == pytest.approx(0.01)

    def test_bounds_only_grow(self):
        """Bounds never shrink while the run continues."""
        sim = make_simulation(current=10.0)
        sim.start()
        previous = sim.plot_bounds.as_dict()
        for _ in range(500):
            sim.tick()
            current = sim.plot_bounds.as_dict()
            for key in ('plot_y_max', 'phase_x_max', 'phase_y_max'):
                assert current[key] >= previous[key]
            for key in ('plot_y_min', 'phase_x_min', 'phase_y_min'):
                assert current[key] <= previous[key]
            previous = current

    def test_current_floor_margin(self):
        """A new current minimum drops the lower bound by the floor margin."""
        sim = make_simulation(NeuronModel.HODGKIN_HUXLEY)
        sim.start()
        sim.tick()

        b = sim.plot_bounds
        i_k = sim.samples('k_current')[0, 1]
        i_leak = sim.samples('leak_current')[0, 1]

        assert i_k < PLOT_DEFAULTS.current_y[0]
        assert b.current_y_min == pytest.approx(i_k - PLOT_DEFAULTS.current_floor_margin)
        assert b.current_y_max == pytest.approx(i_leak)

    def test_reset_restores_defaults(self):
        """reset() puts every bound back to its default."""
        sim = make_simulation(NeuronModel.HODGKIN_HUXLEY, current=300.0)
        sim.start()
        sim.run(300)
        sim.reset()

        assert sim.plot_bounds == PlotBounds.from_defaults(PLOT_DEFAULTS)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

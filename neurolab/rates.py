"""
Voltage-dependent transition rates of the Hodgkin-Huxley gates.

Uses the original 1952 convention, where V is the displacement from the
resting potential (depolarisation positive). alpha_m and alpha_n have
removable singularities at V = 25 and V = 10; the analytic limits are
returned there.
"""

import numpy as np


def alpha_m(V):
    # Limit as V -> 25 (L'Hopital)
    if V == 25.0:
        return 1.0
    return (25.0 - V) / (10.0 * (np.exp((25.0 - V) / 10.0) - 1.0))


def beta_m(V):
    return 4.0 * np.exp(-V / 18.0)


def alpha_h(V):
    return 0.07 * np.exp(-V / 20.0)


def beta_h(V):
    return 1.0 / (np.exp((30.0 - V) / 10.0) + 1.0)


def alpha_n(V):
    # Limit as V -> 10 (L'Hopital)
    if V == 10.0:
        return 0.1
    return (10.0 - V) / (100.0 * (np.exp((10.0 - V) / 10.0) - 1.0))


def beta_n(V):
    return 0.125 * np.exp(-V / 80.0)


def steady_state(alpha, beta, V):
    """Gate value at equilibrium for a clamped voltage: alpha / (alpha + beta)."""
    a = alpha(V)
    return a / (a + beta(V))

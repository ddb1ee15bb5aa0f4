"""
Fixed-step classical Runge-Kutta (RK4) integrator.

The integrator owns one contiguous (5, n) scratch array whose rows hold the
four stage slopes k1..k4 and the intermediate state. It is allocated once per
model and reused on every step, so stepping does not allocate.

The derivative function has the signature ``derivative(state, out, params)``:
it reads ``state``, writes dy/dt into ``out`` and may record observables on
``params`` as a side effect. Only the last evaluation (k4, taken at
y_n + dt*k3) leaves its side effects in place after a step.
"""

import logging
from typing import Any, Callable

import numpy as np

from .exceptions import ModelReleasedError

logger = logging.getLogger(__name__)

DerivativeFunc = Callable[[np.ndarray, np.ndarray, Any], None]


class RK4Integrator:
    """
    Classical 4th-order Runge-Kutta stepper for an n-dimensional ODE system.

        k1 = f(y_n)
        k2 = f(y_n + dt/2 * k1)
        k3 = f(y_n + dt/2 * k2)
        k4 = f(y_n + dt * k3)
        y_{n+1} = y_n + dt/6 * (k1 + 2*k2 + 2*k3 + k4)
    """

    def __init__(self, derivative: DerivativeFunc, params: Any, n: int, dt: float):
        if n < 1:
            raise ValueError(f"System dimension must be positive, got {n}")
        if dt <= 0.0:
            raise ValueError(f"Time step must be positive, got {dt}")

        self.derivative = derivative
        self.params = params
        self.n = n
        self.dt = dt

        self._buffer = np.zeros((5, n), dtype=np.float64)
        logger.debug("Allocated RK4 scratch buffer (n=%d, dt=%g)", n, dt)

    @property
    def released(self) -> bool:
        return self._buffer is None

    def step(self, state: np.ndarray):
        """Advance ``state`` by one time step, in place."""
        if self._buffer is None:
            raise ModelReleasedError("RK4 integrator used after free()")

        f = self.derivative
        params = self.params
        dt = self.dt
        half_dt = 0.5 * dt
        k1, k2, k3, k4, temp = self._buffer

        f(state, k1, params)

        np.multiply(k1, half_dt, out=temp)
        temp += state
        f(temp, k2, params)

        np.multiply(k2, half_dt, out=temp)
        temp += state
        f(temp, k3, params)

        np.multiply(k3, dt, out=temp)
        temp += state
        f(temp, k4, params)

        # Reuse temp to accumulate k1 + 2*(k2 + k3) + k4
        np.add(k2, k3, out=temp)
        temp *= 2.0
        temp += k1
        temp += k4
        temp *= dt / 6.0
        state += temp

    def free(self):
        """Release the scratch buffer. Safe to call more than once."""
        if self._buffer is not None:
            self._buffer = None
            logger.debug("Released RK4 scratch buffer (n=%d)", self.n)

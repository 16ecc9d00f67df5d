"""Type definitions and protocols for regression_forests."""

from typing import Any, Protocol

import numpy as np
from numpy.typing import NDArray


class EvalFunc(Protocol):
    """Protocol for the black-box oracle sampled by the active grower."""

    def __call__(self, x: NDArray[np.float64]) -> float:
        """
        Evaluate the oracle at one input point.

        Parameters
        ----------
        x
            Input vector of length D.

        Returns
        -------
        float
            Observed output at ``x``.
        """
        ...


class PredictorProtocol(Protocol):
    """Protocol for models exposing a vectorized predict method."""

    def predict(self, X: NDArray[Any]) -> NDArray[Any]:
        """
        Predict target values for input features.

        Parameters
        ----------
        X
            Input feature matrix.

        Returns
        -------
        NDArray[Any]
            Predicted target values.
        """
        ...


# Type aliases for better readability
Subset = NDArray[np.intp]
Space = NDArray[np.float64]
ArrayLike = NDArray[Any]

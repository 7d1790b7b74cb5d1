import numpy as np
from sklearn.preprocessing import MinMaxScaler
from typing import Optional
import logging

from svmdata.errors import InvalidArgumentError, StateError

class FeatureScaler:
    """Class for rescaling every feature column linearly into [lower, upper]"""

    def __init__(self, lower: float = 0.0, upper: float = 1.0, logger: Optional[logging.Logger] = None):
        """
        Initialize FeatureScaler

        Args:
            lower: Value the column minimum is mapped to
            upper: Value the column maximum is mapped to
            logger: Logger instance from the caller
        """
        if not lower < upper:
            raise InvalidArgumentError(f"Rescale bounds must satisfy lower < upper, got [{lower}, {upper}]")
        self.lower = lower
        self.upper = upper
        self.logger = logger or logging.getLogger('scaler')
        self.scaler_ = None  # Fitted MinMaxScaler

    def fit_transform(self, X: np.ndarray) -> np.ndarray:
        """
        Fit column ranges on X and rescale it

        A constant column maps to lower. An empty matrix is returned unchanged.

        Args:
            X: Feature matrix

        Returns:
            Rescaled copy of X
        """
        if X.shape[0] == 0 or X.shape[1] == 0:
            return X.copy()

        self.logger.debug(f"Rescaling {X.shape[1]} features into [{self.lower}, {self.upper}]...")
        self.scaler_ = MinMaxScaler(feature_range=(self.lower, self.upper))
        X_scaled = self.scaler_.fit_transform(X)

        X_scaled[:, self.scaler_.data_range_ == 0] = self.lower

        # Rounding in the affine map can step just outside the bounds
        np.clip(X_scaled, self.lower, self.upper, out=X_scaled)
        return X_scaled.astype(X.dtype, copy=False)

    def transform(self, X: np.ndarray) -> np.ndarray:
        """
        Rescale X with the column ranges fitted by fit_transform

        Values outside the fitted ranges fall outside [lower, upper].
        """
        if self.scaler_ is None:
            raise StateError("Scaler not fitted. Call fit_transform first.")
        return self.scaler_.transform(X).astype(X.dtype, copy=False)

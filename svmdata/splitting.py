import numbers
import numpy as np
from typing import Optional, Tuple

from svmdata.errors import InvalidArgumentError


def shuffle_rows(X: np.ndarray,
                 y: np.ndarray,
                 prob: np.ndarray,
                 random_state: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Reorder the rows of the three dataset matrices by one random permutation

    Empty label/probability matrices (unlabeled data) are returned as they are.

    Args:
        X: Feature matrix
        y: Label vector, may be empty
        prob: Posterior probability matrix, may be empty
        random_state: Random seed, None for a fresh one

    Returns:
        Tuple of the reordered (X, y, prob)
    """
    perm = np.random.RandomState(random_state).permutation(X.shape[0])
    X = X[perm]
    if len(y):
        y = y[perm]
    if len(prob):
        prob = prob[perm]
    return X, y, prob


def split_rows(n_samples: int, ratio: int) -> Tuple[slice, slice]:
    """
    Compute the row ranges of a validation/training split

    The first n_samples // ratio rows form the validation set and the
    remaining rows the training set, in their current order.

    Args:
        n_samples: Number of rows in the dataset
        ratio: One in every `ratio` rows goes to validation, must be > 1

    Returns:
        Tuple[slice, slice]: (validation rows, training rows)
    """
    if isinstance(ratio, bool) or not isinstance(ratio, numbers.Integral) or ratio <= 1:
        raise InvalidArgumentError(f"Split ratio must be an integer greater than 1, got {ratio!r}")

    n_valid = n_samples // ratio
    if n_samples > 0 and n_valid == 0:
        raise InvalidArgumentError(
            f"Split ratio {ratio} leaves no validation rows out of {n_samples}"
        )
    return slice(0, n_valid), slice(n_valid, n_samples)

import numpy as np
import logging
from typing import Optional

from svmdata import config
from svmdata.errors import InvalidArgumentError, StateError

class LabelProcessor:
    """Class for mapping raw labels to class indices and one-hot posterior probabilities"""

    LABEL_ORDERS = ('sorted', 'appearance')

    def __init__(self,
                 label_order: str = config.LABEL_ORDER,
                 dtype=config.DTYPE,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize LabelProcessor

        Args:
            label_order: 'sorted' numbers classes by ascending raw value,
                'appearance' by the order in which they first occur
            dtype: Element type of the returned arrays
            logger: Logger instance from the caller
        """
        if label_order not in self.LABEL_ORDERS:
            raise InvalidArgumentError(
                f"label_order must be one of {self.LABEL_ORDERS}, got '{label_order}'"
            )
        self.label_order = label_order
        self.dtype = dtype
        self.logger = logger or logging.getLogger('labels')
        self.classes_ = None  # Raw label value of each class index

    @property
    def n_classes(self) -> int:
        return 0 if self.classes_ is None else len(self.classes_)

    def convert_to_standard_labels(self, y: np.ndarray) -> np.ndarray:
        """
        Remap raw labels to contiguous class indices 0..C-1

        Args:
            y: Raw label vector

        Returns:
            Vector of class indices, same length as y
        """
        y = np.asarray(y).ravel()

        if self.label_order == 'sorted':
            classes, inverse = np.unique(y, return_inverse=True)
        else:
            uniques, first_index, inverse = np.unique(y, return_index=True, return_inverse=True)
            order = np.argsort(first_index)
            classes = uniques[order]
            rank = np.empty_like(order)
            rank[order] = np.arange(len(order))
            inverse = rank[inverse.ravel()]

        self.classes_ = classes
        self.logger.debug(f"Standardized {len(y)} labels into {len(classes)} classes: {classes.tolist()}")
        return inverse.ravel().astype(self.dtype)

    def label_to_posterior_prob(self, y_std: np.ndarray) -> np.ndarray:
        """
        Build the one-hot posterior probability matrix of standardized labels

        Args:
            y_std: Class indices returned by convert_to_standard_labels

        Returns:
            Matrix of shape (len(y_std), n_classes) with a single 1.0 per row
        """
        if self.classes_ is None:
            raise StateError("Labels must be standardized before computing posterior probabilities")

        y_std = np.asarray(y_std).ravel()
        indices = y_std.astype(int)
        if indices.size and (indices.min() < 0
                             or indices.max() >= self.n_classes
                             or not np.array_equal(indices, y_std)):
            raise InvalidArgumentError(
                f"Standardized labels must be integers in [0, {self.n_classes})"
            )

        prob = np.zeros((len(indices), self.n_classes), dtype=self.dtype)
        prob[np.arange(len(indices)), indices] = 1.0
        return prob

    def inverse_transform(self, y_std: np.ndarray) -> np.ndarray:
        """Map class indices back to the raw label values"""
        if self.classes_ is None:
            raise StateError("Labels must be standardized before they can be mapped back")
        return self.classes_[np.asarray(y_std).ravel().astype(int)]

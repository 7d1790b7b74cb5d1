import time
import numpy as np
import logging
from typing import Dict, Optional, Tuple

from svmdata import config
from svmdata.errors import DatasetError, InvalidArgumentError, OutOfRangeError, StateError
from svmdata.labels import LabelProcessor
from svmdata.parsing import Encoding, find_dimension, find_max_dimension, get_line_number, parse_file, sniff
from svmdata.scaler import FeatureScaler
from svmdata.splitting import shuffle_rows, split_rows

class DataSet:
    """Dataset class for dense and sparse (LIBSVM format) training data

    Holds three matrices: features X of shape (N, D), standardized labels y of
    shape (N,) and one-hot posterior probabilities of shape (N, C). Labels and
    probabilities are empty for unlabeled data.
    """

    def __init__(self,
                 filepath: Optional[str] = None,
                 rescale: bool = False,
                 has_label: bool = True,
                 label_order: str = config.LABEL_ORDER,
                 dtype=config.DTYPE,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize DataSet object, reading filepath when given

        Args:
            filepath: Full path to the dataset file
            rescale: Whether to rescale every feature into config.RESCALE_RANGE
            has_label: Whether dense records start with a label column
            label_order: How raw labels are numbered, see LabelProcessor
            dtype: Element type of the matrices
            logger: Logger instance from the caller
        """
        self.label_order = label_order
        self.dtype = dtype
        self.logger = logger or logging.getLogger('dataset')

        self.filepath = None
        self.encoding = None
        self.classes_ = np.empty(0, dtype=dtype)

        self._X = np.zeros((0, 0), dtype=dtype)
        self._y = np.zeros(0, dtype=dtype)
        self._prob = np.zeros((0, 0), dtype=dtype)

        if filepath is not None:
            self.read(filepath, rescale, has_label)

    def read(self, filepath: str, rescale: bool = False, has_label: bool = True) -> 'DataSet':
        """
        Load data from file

        The dataset is only updated once the whole file has been parsed, so a
        failed read leaves it as it was.

        Args:
            filepath: Full path to the dataset file
            rescale: Whether to rescale every feature into config.RESCALE_RANGE
            has_label: Whether dense records start with a label column

        Returns:
            The dataset itself
        """
        self.logger.info(f"Loading dataset: {filepath}")
        start_time = time.time()

        try:
            encoding = sniff(filepath)
            n_samples = get_line_number(filepath)
            if encoding is Encoding.SPARSE:
                n_features = find_max_dimension(filepath)
            else:
                n_features = find_dimension(filepath, has_label)
            self.logger.debug(f"Detected {encoding.value} encoding, {n_samples} samples, {n_features} features")

            X, y = parse_file(filepath, encoding, n_samples, n_features, has_label, self.dtype)

            if y is not None and len(y):
                processor = LabelProcessor(self.label_order, self.dtype, self.logger)
                y = processor.convert_to_standard_labels(y)
                prob = processor.label_to_posterior_prob(y)
                classes = processor.classes_
            else:
                y = np.zeros(0, dtype=self.dtype)
                prob = np.zeros((0, 0), dtype=self.dtype)
                classes = np.empty(0, dtype=self.dtype)

            if rescale:
                X = FeatureScaler(*config.RESCALE_RANGE, logger=self.logger).fit_transform(X)
        except DatasetError as e:
            self.logger.error(f"Failed to read {filepath}: {e}")
            raise

        self._X, self._y, self._prob = X, y, prob
        self.classes_ = classes
        self.filepath = filepath
        self.encoding = encoding

        self.logger.info(f"Dataset loaded in {time.time() - start_time:.2f} seconds: "
                         f"{self.size()} samples, {self.get_input_dimension()} features, "
                         f"{self.get_class_number()} classes")
        return self

    def convert_to_standard_labels(self) -> None:
        """
        Renumber the current labels into contiguous class indices

        Classes no longer present are dropped, so C can shrink (e.g. on a
        split). The posterior probabilities are rebuilt to match.
        """
        if not self.is_labeled():
            raise StateError("Cannot standardize labels of an unlabeled dataset")
        processor = LabelProcessor(self.label_order, self.dtype, self.logger)
        self._y = processor.convert_to_standard_labels(self._y)
        if len(self.classes_):
            # Labels were already indices into classes_
            self.classes_ = self.classes_[processor.classes_.astype(int)]
        else:
            self.classes_ = processor.classes_
        self.label_to_posterior_prob()

    def label_to_posterior_prob(self) -> None:
        """Rebuild the one-hot posterior probability matrix from the labels"""
        if not self.is_labeled():
            raise StateError("Cannot compute posterior probabilities of an unlabeled dataset")
        processor = LabelProcessor(self.label_order, self.dtype, self.logger)
        processor.classes_ = self.classes_
        self._prob = processor.label_to_posterior_prob(self._y)

    def rescale_feature(self, lower: float = 0.0, upper: float = 1.0) -> FeatureScaler:
        """
        Rescale every feature column into [lower, upper]

        Returns:
            The fitted FeatureScaler, to apply the same mapping to other data
        """
        scaler = FeatureScaler(lower, upper, logger=self.logger)
        self._X = scaler.fit_transform(self._X)
        return scaler

    def shuffle_feature(self, random_state: Optional[int] = None) -> None:
        """Randomly reorder the rows, keeping features, labels and probabilities aligned"""
        self._X, self._y, self._prob = shuffle_rows(self._X, self._y, self._prob, random_state)

    def split_into_train_and_valid_set(self, ratio: int = config.DEFAULT_VALID_RATIO) -> Tuple['DataSet', 'DataSet']:
        """
        Split into disjoint training and validation sets

        The first size() // ratio rows form the validation set, the rest the
        training set. Call shuffle_feature() first for a random split.

        Args:
            ratio: One in every `ratio` rows goes to validation, must be > 1

        Returns:
            Tuple[DataSet, DataSet]: (train, valid), each owning copies of its rows
        """
        try:
            valid_rows, train_rows = split_rows(self.size(), ratio)
        except InvalidArgumentError as e:
            self.logger.error(f"Cannot split dataset: {e}")
            raise

        train = self._subset(train_rows)
        valid = self._subset(valid_rows)
        self.logger.info(f"Split dataset into {train.size()} training and {valid.size()} validation samples")
        return train, valid

    def _subset(self, rows: slice) -> 'DataSet':
        subset = DataSet(label_order=self.label_order, dtype=self.dtype, logger=self.logger)
        subset.filepath = self.filepath
        subset.encoding = self.encoding
        subset.classes_ = self.classes_.copy()
        subset._X = self._X[rows].copy()
        if self.is_labeled():
            subset._y = self._y[rows].copy()
            subset._prob = self._prob[rows].copy()
        else:
            subset._prob = self._prob.copy()
        return subset

    def _row_range(self, offset: Optional[int], n_data: Optional[int]) -> slice:
        if offset is None and n_data is None:
            return slice(0, self.size())
        if offset is None or n_data is None:
            raise InvalidArgumentError("offset and n_data must be given together")
        if offset < 0 or n_data < 0 or offset + n_data > self.size():
            raise OutOfRangeError(
                f"Rows [{offset}, {offset + n_data}) out of range for dataset of size {self.size()}"
            )
        return slice(offset, offset + n_data)

    def get_x(self, offset: Optional[int] = None, n_data: Optional[int] = None) -> np.ndarray:
        """Copy of the features of rows [offset, offset + n_data), all rows by default"""
        return self._X[self._row_range(offset, n_data)].copy()

    def get_y(self, offset: Optional[int] = None, n_data: Optional[int] = None) -> np.ndarray:
        """Copy of the standardized labels of a row range, empty for unlabeled data"""
        rows = self._row_range(offset, n_data)
        return self._y[rows].copy()

    def get_prob(self, offset: Optional[int] = None, n_data: Optional[int] = None) -> np.ndarray:
        """Copy of the posterior probabilities of a row range, empty for unlabeled data"""
        rows = self._row_range(offset, n_data)
        return self._prob[rows].copy()

    def size(self) -> int:
        return self._X.shape[0]

    def __len__(self) -> int:
        return self.size()

    def get_input_dimension(self) -> int:
        return self._X.shape[1]

    def get_output_dimension(self) -> int:
        return self._prob.shape[1]

    def get_class_number(self) -> int:
        return len(self.classes_)

    def is_labeled(self) -> bool:
        return self._y.size > 0

    def get_stats(self) -> Dict:
        """Get dataset statistics"""
        stats = {
            "filepath": self.filepath,
            "encoding": self.encoding.value if self.encoding else None,
            "n_samples": self.size(),
            "n_features": self.get_input_dimension(),
            "n_classes": self.get_class_number(),
            "labeled": self.is_labeled(),
        }
        if self.is_labeled():
            counts = np.bincount(self._y.astype(int), minlength=self.get_class_number())
            stats["label_distribution"] = dict(zip(self.classes_.tolist(), counts.tolist()))
        return stats

    def show_summary(self) -> str:
        """Log a summary of the dataset and return it"""
        stats = self.get_stats()
        report = "\n=== Dataset Summary ===\n"
        report += f"File: {stats['filepath']}\n"
        report += f"Encoding: {stats['encoding']}\n"
        report += f"Number of samples: {stats['n_samples']}\n"
        report += f"Number of features: {stats['n_features']}\n"
        report += f"Number of classes: {stats['n_classes']}\n"
        report += f"Labeled: {stats['labeled']}\n"
        if stats['labeled']:
            report += f"Label distribution: {stats['label_distribution']}\n"
        self.logger.info(report)
        return report

    def __repr__(self) -> str:
        return (f"DataSet(filepath={self.filepath!r}, n_samples={self.size()}, "
                f"n_features={self.get_input_dimension()}, n_classes={self.get_class_number()})")

# Example usage
if __name__ == '__main__':
    try:
        dataset = DataSet("a9a.libsvm", rescale=True)
        train, valid = dataset.split_into_train_and_valid_set(5)
        print(dataset.show_summary())
        print(f"Train: {train.size()} samples, Valid: {valid.size()} samples")
    except DatasetError as e:
        print(f"\nError: {e}")

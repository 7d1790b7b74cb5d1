import re
import logging
from enum import Enum
from typing import Iterator, List, Optional, TextIO, Tuple

import numpy as np
import scipy.sparse
from sklearn.datasets import load_svmlight_file

from svmdata import config
from svmdata.errors import DatasetIOError, InvalidArgumentError, ParseError

logger = logging.getLogger('parsing')

_DENSE_SPLIT = re.compile(config.DENSE_SPLIT_PATTERN)


class Encoding(Enum):
    DENSE = "dense"
    SPARSE = "sparse"


def _open(filepath: str) -> TextIO:
    try:
        return open(filepath, 'r', encoding='utf-8')
    except OSError as e:
        raise DatasetIOError(f"Cannot open dataset file {filepath}: {e}") from e


def _records(f: TextIO, filepath: str) -> Iterator[Tuple[int, str]]:
    """Yield (line number, stripped line) for every line left non-blank once its comment is removed"""
    try:
        for line_no, line in enumerate(f, start=1):
            line = line.split(config.COMMENT_CHAR, 1)[0].strip()
            if line:
                yield line_no, line
    except UnicodeDecodeError as e:
        raise ParseError(f"File is not valid UTF-8 text: {e}", filepath) from e


def _split_dense(line: str) -> List[str]:
    return [token for token in _DENSE_SPLIT.split(line) if token]


def _to_float(token: str, filepath: str, line_no: int) -> float:
    try:
        value = float(token)
    except ValueError:
        raise ParseError(f"Non-numeric token '{token}'", filepath, line_no) from None
    if not np.isfinite(value):
        raise ParseError(f"Non-finite value '{token}'", filepath, line_no)
    return value


def _parse_sparse_token(token: str, filepath: str, line_no: int) -> Tuple[int, float]:
    """Split an 'index:value' token into its integer index and float value"""
    index, sep, value = token.partition(config.SPARSE_DELIMITER)
    if not sep or not index or not value:
        raise ParseError(f"Malformed sparse token '{token}'", filepath, line_no)
    try:
        index = int(index)
    except ValueError:
        raise ParseError(f"Non-integer feature index in '{token}'", filepath, line_no) from None
    if index < 0:
        raise ParseError(f"Negative feature index in '{token}'", filepath, line_no)
    return index, _to_float(value, filepath, line_no)


def _is_label_token(token: str) -> bool:
    return config.SPARSE_DELIMITER not in token


def is_file_sparse(filepath: str, n_lines: int = config.SNIFF_LINES) -> bool:
    """
    Detect whether a dataset file uses the sparse index:value encoding

    Only the first n_lines records are inspected.

    Args:
        filepath: Path to the dataset file
        n_lines: Number of records to inspect

    Returns:
        True if any inspected token contains the index:value delimiter
    """
    with _open(filepath) as f:
        for i, (_, line) in enumerate(_records(f, filepath)):
            if i >= n_lines:
                break
            if config.SPARSE_DELIMITER in line:
                return True
    return False


def sniff(filepath: str) -> Encoding:
    """Pick the encoding used to parse a dataset file"""
    return Encoding.SPARSE if is_file_sparse(filepath) else Encoding.DENSE


def get_line_number(filepath: str) -> int:
    """Count the records (lines that are not blank or comment-only) of a dataset file"""
    with _open(filepath) as f:
        return sum(1 for _ in _records(f, filepath))


def _scan_sparse(filepath: str) -> Tuple[int, Optional[bool], bool]:
    """
    Validate every record of a sparse file

    Returns:
        Tuple of (largest feature index or -1, whether the records carry labels
        or None for a file without records, whether every record lists
        strictly increasing indices)
    """
    max_index = -1
    labeled = None
    ordered = True
    with _open(filepath) as f:
        for line_no, line in _records(f, filepath):
            tokens = line.split()
            row_labeled = _is_label_token(tokens[0])
            if labeled is None:
                labeled = row_labeled
            elif row_labeled != labeled:
                raise ParseError("Labeled and unlabeled records are mixed", filepath, line_no)

            if row_labeled:
                _to_float(tokens[0], filepath, line_no)
                tokens = tokens[1:]

            prev_index = -1
            for token in tokens:
                index, _ = _parse_sparse_token(token, filepath, line_no)
                if index <= prev_index:
                    ordered = False
                prev_index = index
                if index > max_index:
                    max_index = index
    return max_index, labeled, ordered


def find_max_dimension(filepath: str) -> int:
    """
    Scan a sparse file for its feature dimensionality

    Returns:
        max(index) + 1 over all index:value tokens, 0 if there are none
    """
    max_index, _, _ = _scan_sparse(filepath)
    return max_index + 1


def find_dimension(filepath: str, has_label: bool = True) -> int:
    """
    Get the feature dimensionality of a dense file

    Args:
        filepath: Path to the dataset file
        has_label: Whether the first column of every record is the label

    Returns:
        Token count of the first record, minus one for the label column
    """
    n_tokens = None
    with _open(filepath) as f:
        for line_no, line in _records(f, filepath):
            count = len(_split_dense(line))
            if n_tokens is None:
                n_tokens = count
            elif count != n_tokens:
                raise ParseError(
                    f"Expected {n_tokens} tokens per record, found {count}", filepath, line_no
                )
    if n_tokens is None:
        return 0
    return n_tokens - 1 if has_label else n_tokens


def _read_dense_feature(filepath: str,
                        n_samples: int,
                        n_features: int,
                        has_label: bool,
                        dtype) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    X = np.zeros((n_samples, n_features), dtype=dtype)
    y = np.zeros(n_samples, dtype=dtype) if has_label else None
    expected = n_features + 1 if has_label else n_features

    row = 0
    with _open(filepath) as f:
        for line_no, line in _records(f, filepath):
            if row >= n_samples:
                raise ParseError(f"More than the expected {n_samples} records", filepath, line_no)

            tokens = _split_dense(line)
            if len(tokens) != expected:
                raise ParseError(
                    f"Expected {expected} tokens per record, found {len(tokens)}", filepath, line_no
                )

            values = [_to_float(token, filepath, line_no) for token in tokens]
            if has_label:
                y[row] = values[0]
                values = values[1:]
            X[row] = values
            row += 1

    if row != n_samples:
        raise ParseError(f"Expected {n_samples} records, found {row}", filepath)
    return X, y


def _load_svmlight(filepath: str,
                   n_samples: int,
                   n_features: int,
                   dtype) -> Tuple[np.ndarray, np.ndarray]:
    try:
        X, y = load_svmlight_file(filepath, n_features=n_features, zero_based=True, dtype=dtype)
    except ValueError as e:
        raise ParseError(str(e), filepath) from e

    if X.shape[0] != n_samples:
        raise ParseError(f"Expected {n_samples} records, found {X.shape[0]}", filepath)
    return X.toarray(), np.asarray(y, dtype=dtype)


def _read_sparse_feature(filepath: str,
                         n_samples: int,
                         n_features: int,
                         dtype) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    _, labeled, ordered = _scan_sparse(filepath)

    # load_svmlight_file needs a label on every record and sorted, unique indices
    if labeled and ordered and n_features > 0:
        return _load_svmlight(filepath, n_samples, n_features, dtype)
    return _read_sparse_records(filepath, n_samples, n_features, dtype)


def _read_sparse_records(filepath: str,
                         n_samples: int,
                         n_features: int,
                         dtype) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    labels = []
    rows = []
    cols = []
    data = []
    labeled = None

    row = 0
    with _open(filepath) as f:
        for line_no, line in _records(f, filepath):
            if row >= n_samples:
                raise ParseError(f"More than the expected {n_samples} records", filepath, line_no)

            tokens = line.split()
            row_labeled = _is_label_token(tokens[0])
            if labeled is None:
                labeled = row_labeled
            elif row_labeled != labeled:
                raise ParseError("Labeled and unlabeled records are mixed", filepath, line_no)

            if row_labeled:
                labels.append(_to_float(tokens[0], filepath, line_no))
                tokens = tokens[1:]

            # Later duplicates of an index overwrite earlier ones
            entries = {}
            for token in tokens:
                index, value = _parse_sparse_token(token, filepath, line_no)
                if index >= n_features:
                    raise ParseError(
                        f"Feature index {index} out of range [0, {n_features})", filepath, line_no
                    )
                entries[index] = value

            for index, value in entries.items():
                rows.append(row)
                cols.append(index)
                data.append(value)
            row += 1

    if row != n_samples:
        raise ParseError(f"Expected {n_samples} records, found {row}", filepath)

    if data:
        X = scipy.sparse.csr_matrix(
            (data, (rows, cols)), shape=(n_samples, n_features), dtype=dtype
        ).toarray()
    else:
        X = np.zeros((n_samples, n_features), dtype=dtype)

    y = np.asarray(labels, dtype=dtype) if labeled else None
    return X, y


def parse_file(filepath: str,
               encoding: Encoding,
               n_samples: int,
               n_features: int,
               has_label: bool = True,
               dtype=config.DTYPE) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Parse a dataset file into a feature matrix and a label vector

    Sparse files detect the label column on their own (a leading token without
    the index:value delimiter), so has_label only applies to dense files.

    Args:
        filepath: Path to the dataset file
        encoding: Encoding returned by sniff()
        n_samples: Number of records, from get_line_number()
        n_features: Feature dimensionality, from find_dimension() or find_max_dimension()
        has_label: Whether dense records start with a label column
        dtype: Element type of the returned arrays

    Returns:
        Tuple[np.ndarray, Optional[np.ndarray]]: (features of shape (n_samples, n_features),
        labels of shape (n_samples,) or None for unlabeled data)
    """
    if not isinstance(encoding, Encoding):
        raise InvalidArgumentError(f"Unknown encoding: {encoding!r}")

    logger.debug(f"Parsing {filepath} as {encoding.value}: {n_samples} x {n_features}")
    if encoding is Encoding.SPARSE:
        return _read_sparse_feature(filepath, n_samples, n_features, dtype)
    return _read_dense_feature(filepath, n_samples, n_features, has_label, dtype)

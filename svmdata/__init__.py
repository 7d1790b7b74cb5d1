"""Load dense and sparse (LIBSVM format) training data into numpy matrices."""

from svmdata.dataset import DataSet
from svmdata.errors import (
    DatasetError,
    DatasetIOError,
    InvalidArgumentError,
    OutOfRangeError,
    ParseError,
    StateError,
)
from svmdata.labels import LabelProcessor
from svmdata.logger import Logger
from svmdata.parsing import (
    Encoding,
    find_dimension,
    find_max_dimension,
    get_line_number,
    is_file_sparse,
    parse_file,
    sniff,
)
from svmdata.scaler import FeatureScaler
from svmdata.splitting import shuffle_rows, split_rows

__version__ = "0.1.0"

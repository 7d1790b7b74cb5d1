class DatasetError(Exception):
    """Base class for all errors raised while loading or handling a DataSet"""


class DatasetIOError(DatasetError, OSError):
    """Dataset file is missing or cannot be read"""


class ParseError(DatasetError, ValueError):
    """Malformed token, inconsistent token count or feature index out of bounds"""

    def __init__(self, message: str, filepath: str = None, line_no: int = None):
        self.filepath = filepath
        self.line_no = line_no
        if filepath is not None and line_no is not None:
            message = f"{filepath}:{line_no}: {message}"
        elif filepath is not None:
            message = f"{filepath}: {message}"
        super().__init__(message)


class StateError(DatasetError, RuntimeError):
    """Operation invoked before the data it depends on is available"""


class InvalidArgumentError(DatasetError, ValueError):
    """Bad split ratio, rescale bounds or accessor arguments"""


class OutOfRangeError(DatasetError, IndexError):
    """Requested row range exceeds the dataset size"""

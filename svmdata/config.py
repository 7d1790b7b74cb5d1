import numpy as np

# Configuration constants
SNIFF_LINES = 100          # Records inspected when detecting the encoding
SPARSE_DELIMITER = ":"     # Separates index and value in sparse tokens
COMMENT_CHAR = "#"         # Starts a trailing comment, as in LIBSVM files
DENSE_SPLIT_PATTERN = r"[,\s]+"

RESCALE_RANGE = (0.0, 1.0)
DEFAULT_VALID_RATIO = 5    # 1/5 of the rows go to the validation set
RANDOM_STATE = 42

# 'sorted' maps raw labels by ascending value, 'appearance' by first occurrence
LABEL_ORDER = "sorted"
DTYPE = np.float64

# Logging
LOG_DIR = "./log"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_LEVEL = "INFO"

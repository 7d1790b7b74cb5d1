import unittest
import os
import sys
import tempfile
import numpy as np

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from svmdata.errors import DatasetIOError, InvalidArgumentError, ParseError
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

DENSE_TEXT = "1 0.5 0.2\n0 0.1 0.9\n"
SPARSE_TEXT = "1 1:0.5\n0 2:0.9\n"

class TestParsing(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        """Set up test environment"""
        cls.logger = Logger().get_logger('test')

    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp_dir.cleanup()

    def write(self, name, content):
        path = os.path.join(self.tmp_dir.name, name)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        return path

    def test_sparse_detection(self):
        """Test sparse vs dense detection"""
        self.logger.info("\nTesting encoding detection")

        self.assertTrue(is_file_sparse(self.write('sparse.txt', SPARSE_TEXT)))
        self.assertFalse(is_file_sparse(self.write('dense.txt', DENSE_TEXT)))
        self.assertFalse(is_file_sparse(self.write('comma.csv', "1,0.5,0.2\n0,0.1,0.9\n")))
        self.assertTrue(is_file_sparse(self.write('unlabeled.txt', "0:1 3:2\n")))

        self.assertIs(sniff(self.write('s.txt', SPARSE_TEXT)), Encoding.SPARSE)
        self.assertIs(sniff(self.write('d.txt', DENSE_TEXT)), Encoding.DENSE)

    def test_sparse_detection_reads_bounded_prefix(self):
        """Test that only the first records are inspected"""
        path = self.write('late.txt', "1 2\n3 4\n5 6\n1 0:2\n")
        self.assertFalse(is_file_sparse(path, n_lines=3))
        self.assertTrue(is_file_sparse(path, n_lines=4))

    def test_missing_file(self):
        """Test IO errors on a missing file"""
        missing = os.path.join(self.tmp_dir.name, 'missing.txt')
        for func in (is_file_sparse, get_line_number, find_max_dimension, find_dimension):
            with self.assertRaises(DatasetIOError):
                func(missing)
        with self.assertRaises(OSError):
            is_file_sparse(missing)

    def test_line_number(self):
        """Test record counting"""
        self.assertEqual(get_line_number(self.write('a.txt', DENSE_TEXT)), 2)
        self.assertEqual(get_line_number(self.write('b.txt', "1 2\n3 4")), 2)
        self.assertEqual(get_line_number(self.write('c.txt', "1 2\n\n3 4\n\n")), 2)
        self.assertEqual(get_line_number(self.write('d.txt', "")), 0)

    def test_find_max_dimension(self):
        """Test sparse dimension scan"""
        self.assertEqual(find_max_dimension(self.write('a.txt', SPARSE_TEXT)), 3)
        self.assertEqual(find_max_dimension(self.write('b.txt', "3:1 7:2\n0:1\n")), 8)
        self.assertEqual(find_max_dimension(self.write('c.txt', "")), 0)
        self.assertEqual(find_max_dimension(self.write('d.txt', "1\n0\n")), 0)

    def test_find_max_dimension_malformed(self):
        """Test malformed sparse tokens"""
        for i, text in enumerate(["1 1:\n", "1 a:1\n", "1 -1:2\n", "1 1:x\n", "1 1:0.5 3\n", "1 :4\n"]):
            with self.assertRaises(ParseError):
                find_max_dimension(self.write(f'bad{i}.txt', text))

    def test_find_dimension(self):
        """Test dense dimension"""
        self.assertEqual(find_dimension(self.write('a.txt', DENSE_TEXT)), 2)
        self.assertEqual(find_dimension(self.write('b.csv', "1,0.5,0.2\n0,0.1,0.9\n")), 2)
        self.assertEqual(find_dimension(self.write('c.txt', "1, 0.5 0.2\n0 ,0.1,\t0.9\n")), 2)
        self.assertEqual(find_dimension(self.write('d.txt', DENSE_TEXT), has_label=False), 3)
        self.assertEqual(find_dimension(self.write('e.txt', "")), 0)

    def test_find_dimension_inconsistent(self):
        """Test dense records with different token counts"""
        path = self.write('bad.txt', "1 0.5 0.2\n0 0.1\n")
        with self.assertRaises(ParseError) as ctx:
            find_dimension(path)
        self.assertEqual(ctx.exception.line_no, 2)

    def test_parse_dense(self):
        """Test dense parsing"""
        path = self.write('dense.txt', DENSE_TEXT)
        X, y = parse_file(path, Encoding.DENSE, 2, 2)

        np.testing.assert_allclose(X, [[0.5, 0.2], [0.1, 0.9]])
        np.testing.assert_allclose(y, [1, 0])

    def test_parse_dense_unlabeled(self):
        """Test dense parsing without a label column"""
        path = self.write('dense.txt', DENSE_TEXT)
        X, y = parse_file(path, Encoding.DENSE, 2, 3, has_label=False)

        self.assertIsNone(y)
        np.testing.assert_allclose(X, [[1, 0.5, 0.2], [0, 0.1, 0.9]])

    def test_parse_sparse(self):
        """Test sparse parsing"""
        path = self.write('sparse.txt', SPARSE_TEXT)
        X, y = parse_file(path, Encoding.SPARSE, 2, find_max_dimension(path))

        np.testing.assert_allclose(X, [[0, 0.5, 0], [0, 0, 0.9]])
        np.testing.assert_allclose(y, [1, 0])

    def test_parse_sparse_unlabeled(self):
        """Test sparse parsing without labels"""
        path = self.write('sparse.txt', "0:1.5 2:2\n1:3\n")
        X, y = parse_file(path, Encoding.SPARSE, 2, 3)

        self.assertIsNone(y)
        np.testing.assert_allclose(X, [[1.5, 0, 2], [0, 3, 0]])

    def test_parse_sparse_duplicate_index(self):
        """Test that a repeated index keeps the last value"""
        path = self.write('dup.txt', "1 0:1 0:2\n")
        X, _ = parse_file(path, Encoding.SPARSE, 1, 1)
        self.assertEqual(X[0, 0], 2.0)

    def test_dense_and_sparse_agree(self):
        """Test that both encodings of the same examples give the same features"""
        dense = self.write('dense.txt', "1 0 0.5 0\n0 0 0 0.9\n2 1.5 0 0.25\n")
        sparse = self.write('sparse.txt', "1 1:0.5\n0 2:0.9\n2 2:0.25 0:1.5\n")

        X_dense, y_dense = parse_file(dense, sniff(dense), get_line_number(dense), find_dimension(dense))
        X_sparse, y_sparse = parse_file(sparse, sniff(sparse), get_line_number(sparse),
                                        find_max_dimension(sparse))

        np.testing.assert_allclose(X_dense, X_sparse)
        np.testing.assert_allclose(y_dense, y_sparse)

    def test_parse_errors(self):
        """Test parse failures"""
        self.logger.info("\nTesting parse error handling")

        path = self.write('nan.txt', "1 0.5 0.2\n0 abc 0.9\n")
        with self.assertRaises(ParseError) as ctx:
            parse_file(path, Encoding.DENSE, 2, 2)
        self.assertEqual(ctx.exception.line_no, 2)
        self.assertIn('abc', str(ctx.exception))

        path = self.write('count.txt', "1 0.5 0.2\n0 0.1\n")
        with self.assertRaises(ParseError):
            parse_file(path, Encoding.DENSE, 2, 2)

        path = self.write('range.txt', "1 5:1\n")
        with self.assertRaises(ParseError):
            parse_file(path, Encoding.SPARSE, 1, 3)

        path = self.write('mixed.txt', "1 0:1\n0:2\n")
        with self.assertRaises(ParseError):
            parse_file(path, Encoding.SPARSE, 2, 1)

        path = self.write('label.txt', "x 0:1\n")
        with self.assertRaises(ParseError):
            parse_file(path, Encoding.SPARSE, 1, 1)

    def test_comments_are_ignored(self):
        """Test that '#' comments are not part of any record"""
        path = self.write('dense.txt', "# label f1 f2: dense\n1 0.5 0.2 # first\n0 0.1 0.9\n")
        self.assertFalse(is_file_sparse(path))
        self.assertEqual(get_line_number(path), 2)
        self.assertEqual(find_dimension(path), 2)

        path = self.write('sparse.txt', "1 1:0.5 # first\n# skipped\n0 2:0.9\n")
        self.assertEqual(get_line_number(path), 2)
        X, y = parse_file(path, Encoding.SPARSE, 2, find_max_dimension(path))
        np.testing.assert_allclose(X, [[0, 0.5, 0], [0, 0, 0.9]])
        np.testing.assert_allclose(y, [1, 0])

    def test_non_finite_values(self):
        """Test that inf and nan tokens are rejected"""
        path = self.write('inf.txt', "1 inf 0.2\n0 0.1 0.9\n")
        with self.assertRaises(ParseError) as ctx:
            parse_file(path, Encoding.DENSE, 2, 2)
        self.assertEqual(ctx.exception.line_no, 1)

        path = self.write('nan.txt', "1 0:0.5\n0 1:nan\n")
        with self.assertRaises(ParseError) as ctx:
            find_max_dimension(path)
        self.assertEqual(ctx.exception.line_no, 2)

    def test_invalid_utf8(self):
        """Test error handling with bytes that are not UTF-8 text"""
        path = os.path.join(self.tmp_dir.name, 'binary.txt')
        with open(path, 'wb') as f:
            f.write(b"1 \xff\n")

        for func in (is_file_sparse, get_line_number, find_dimension):
            with self.assertRaises(ParseError):
                func(path)

    def test_unknown_encoding(self):
        """Test error handling with an encoding that is not an Encoding member"""
        path = self.write('dense.txt', DENSE_TEXT)
        with self.assertRaises(InvalidArgumentError):
            parse_file(path, "dense", 2, 2)

    def test_record_count_mismatch(self):
        """Test a record count different from the sniffed one"""
        path = self.write('dense.txt', DENSE_TEXT)
        with self.assertRaises(ParseError):
            parse_file(path, Encoding.DENSE, 1, 2)
        with self.assertRaises(ParseError):
            parse_file(path, Encoding.DENSE, 3, 2)

        path = self.write('sparse.txt', SPARSE_TEXT)
        with self.assertRaises(ParseError):
            parse_file(path, Encoding.SPARSE, 1, 3)

if __name__ == '__main__':
    unittest.main(verbosity=2)

import unittest
from contextlib import redirect_stderr
from io import StringIO

from main import build_parser


class TestCliArguments(unittest.TestCase):

    def test_matches_limit(self):
        args = build_parser().parse_args(["matches", "1", "--limit", "3", "--type", "offer"])
        self.assertEqual(args.limit, 3)
        self.assertEqual(args.type, "offer")

        self.assertIsNone(build_parser().parse_args(["matches", "1"]).limit)

    def test_matches_limit_must_be_positive(self):
        for value in ("0", "-1", "two"):
            with redirect_stderr(StringIO()):
                with self.assertRaises(SystemExit):
                    build_parser().parse_args(["matches", "1", "--limit", value])


if __name__ == "__main__":
    unittest.main()

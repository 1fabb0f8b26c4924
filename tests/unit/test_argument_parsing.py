import logging
import unittest
from unittest.mock import patch

from pr_collector.api_client import DEFAULT_ENDPOINT, DEFAULT_MAX_PAGES
from pr_collector.errors import ValidationError
from pr_collector.main import parse_arguments, validate_arguments

# Configure logging for tests
logging.basicConfig(
    level=logging.DEBUG, format="%(asctime)s - %(levelname)s - %(message)s"
)


class TestArgumentParsing(unittest.TestCase):
    @patch(
        "sys.argv",
        [
            "pr-collector",
            "--author",
            "alice",
            "--state",
            "open",
            "--duration",
            "7",
            "--exc",
            "--debug",
        ],
    )
    def test_parse_arguments_with_all_options(self):
        args = parse_arguments()
        self.assertEqual(args.author, "alice")
        self.assertEqual(args.state, "open")
        self.assertEqual(args.duration, 7)
        self.assertTrue(args.exc)
        self.assertTrue(args.debug)
        self.assertIsNone(args.inventory)

    def test_parse_arguments_short_flags(self):
        args = parse_arguments(["-i", "authors.txt", "-s", "merged", "-d", "30", "-e"])
        self.assertEqual(args.inventory, "authors.txt")
        self.assertEqual(args.state, "merged")
        self.assertEqual(args.duration, 30)
        self.assertTrue(args.exc)
        self.assertIsNone(args.author)

    @patch.dict("os.environ", {}, clear=True)
    def test_parse_arguments_defaults(self):
        args = parse_arguments(["-a", "alice", "-s", "open", "-d", "0"])
        self.assertEqual(args.duration, 0)
        self.assertFalse(args.exc)
        self.assertFalse(args.per_author)
        self.assertFalse(args.debug)
        self.assertEqual(args.endpoint, DEFAULT_ENDPOINT)
        self.assertEqual(args.max_pages, DEFAULT_MAX_PAGES)
        self.assertEqual(args.output_dir, ".")

    @patch.dict("os.environ", {"PR_COLLECTOR_ENDPOINT": "http://localhost:8080/pulls"})
    def test_parse_arguments_endpoint_from_environment(self):
        args = parse_arguments(["-a", "alice", "-s", "open", "-d", "1"])
        self.assertEqual(args.endpoint, "http://localhost:8080/pulls")

    def test_parse_arguments_negative_duration(self):
        with self.assertRaises(SystemExit) as ctx:
            parse_arguments(["-a", "alice", "-s", "open", "-d", "-3"])
        self.assertNotEqual(ctx.exception.code, 0)

    def test_parse_arguments_max_pages(self):
        args = parse_arguments(["-a", "alice", "-s", "open", "-d", "1", "--max-pages", "5"])
        self.assertEqual(args.max_pages, 5)

    def test_parse_arguments_rejects_non_positive_max_pages(self):
        for value in ("0", "-2", "many"):
            with self.subTest(value=value):
                with patch("sys.stderr"):
                    with self.assertRaises(SystemExit) as ctx:
                        parse_arguments(
                            ["-a", "alice", "-s", "open", "-d", "1", "--max-pages", value]
                        )
                self.assertEqual(ctx.exception.code, 2)

    def test_parse_arguments_missing_duration(self):
        with self.assertRaises(SystemExit) as ctx:
            parse_arguments(["-a", "alice", "-s", "open"])
        self.assertNotEqual(ctx.exception.code, 0)


class TestValidateArguments(unittest.TestCase):
    def test_author_only(self):
        validate_arguments(parse_arguments(["-a", "alice", "-s", "open", "-d", "7"]))

    def test_inventory_only(self):
        validate_arguments(parse_arguments(["-i", "authors.txt", "-s", "open", "-d", "7"]))

    def test_author_and_inventory_conflict(self):
        args = parse_arguments(["-a", "alice", "-i", "authors.txt", "-s", "open", "-d", "7"])
        with self.assertRaises(ValidationError) as ctx:
            validate_arguments(args)
        self.assertIn("--author", str(ctx.exception))

    def test_neither_author_nor_inventory(self):
        args = parse_arguments(["-s", "open", "-d", "7"])
        with self.assertRaises(ValidationError):
            validate_arguments(args)

    def test_missing_state(self):
        args = parse_arguments(["-a", "alice", "-d", "7"])
        with self.assertRaises(ValidationError) as ctx:
            validate_arguments(args)
        self.assertIn("--state", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()

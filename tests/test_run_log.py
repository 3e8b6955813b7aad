import json
import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from gradehub.core.errors import AuthError
from gradehub.core.run_log import RunEvent, RunLogger


class RunLoggerTests(unittest.TestCase):
    def test_skipped_event_carries_resource_and_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "logs" / "runs.jsonl"
            logger = RunLogger(path)
            event = logger.log(
                RunEvent.skipped(
                    "missing",
                    "Skipping assignment 9 in course 101",
                    AuthError(403, context="fetching raw submissions for assignment 9"),
                    course_id="101",
                    assignment_id="9",
                )
            )
            self.assertEqual(event.level, "warning")
            data = json.loads(path.read_text().strip())
            self.assertEqual(data["course_id"], "101")
            self.assertEqual(data["assignment_id"], "9")
            self.assertEqual(data["error_type"], "AuthError")
            self.assertIn("403", data["error"])

    def test_finished_event_omits_unset_fields(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "runs.jsonl"
            logger = RunLogger(path)
            logger.log(RunEvent.skipped("recent", "first", AuthError(401), course_id="101"))
            logger.log(RunEvent.finished("recent", "Recent submissions aggregated", records=3))
            first, second = [json.loads(line) for line in path.read_text().splitlines()]
            self.assertNotIn("assignment_id", first)
            self.assertEqual(second["level"], "info")
            self.assertEqual(second["summary"], {"records": 3})
            self.assertNotIn("error", second)

    def test_level_is_restricted(self) -> None:
        with self.assertRaises(ValidationError):
            RunEvent(operation="recent", message="x", level="debug")


if __name__ == "__main__":
    unittest.main()

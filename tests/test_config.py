import tempfile
import unittest
from datetime import timedelta
from pathlib import Path

from gradehub.core.config import (
    HubConfig,
    load_config,
    normalize_host,
    parse_course_ids,
    parse_flag,
    parse_hours,
)
from gradehub.core.errors import ConfigError

REPO_ROOT = Path(__file__).resolve().parents[1]


class ConfigLoadingTests(unittest.TestCase):
    def _write_yaml(self, data: str) -> Path:
        tmp = tempfile.NamedTemporaryFile("w", delete=False, suffix=".yaml")
        tmp.write(data)
        tmp.flush()
        tmp.close()
        self.addCleanup(lambda: Path(tmp.name).unlink(missing_ok=True))
        return Path(tmp.name)

    def test_load_settings_tab_labels(self) -> None:
        path = self._write_yaml(
            """
            Canvas Base URL: https://school.instructure.com/
            Canvas API Token: abc123
            Course IDs (comma-separated): " 101, ,202,101 "
            Hours to Look Back: "48"
            Show Only Ungraded?: "Yes"
            Highlight Late Submissions?: "nope"
            Run Time: "5:00 AM"
            """
        )
        config = load_config(path, env={})
        self.assertIsInstance(config, HubConfig)
        self.assertEqual(config.base_host, "school.instructure.com")
        self.assertEqual(config.api_token, "abc123")
        self.assertEqual(config.course_ids, ["101", "202", "101"])
        self.assertEqual(config.lookback_hours, 48)
        self.assertEqual(config.lookback_window, timedelta(hours=48))
        self.assertTrue(config.ungraded_only)
        self.assertFalse(config.highlight_late)
        self.assertEqual(config.api_root, "https://school.instructure.com")

    def test_load_snake_case_keys_and_yaml_types(self) -> None:
        path = self._write_yaml(
            """
            base_host: school.instructure.com
            api_token: abc123
            course_ids: 12345
            ungraded_only: yes
            highlight_late: true
            follow_pagination: false
            """
        )
        config = load_config(path, env={})
        self.assertEqual(config.course_ids, ["12345"])
        self.assertTrue(config.ungraded_only)
        self.assertTrue(config.highlight_late)
        self.assertFalse(config.follow_pagination)
        self.assertEqual(config.lookback_hours, 24)

    def test_placeholder_host_rejected(self) -> None:
        path = self._write_yaml(
            """
            base_host: yourschool.instructure.com
            api_token: abc123
            course_ids: "1"
            """
        )
        with self.assertRaises(ConfigError) as ctx:
            load_config(path, env={})
        self.assertIn("Canvas Base URL", str(ctx.exception))

    def test_placeholder_token_rejected(self) -> None:
        path = self._write_yaml(
            """
            base_host: school.instructure.com
            api_token: PASTE_YOUR_TOKEN_HERE
            course_ids: "1"
            """
        )
        with self.assertRaises(ConfigError) as ctx:
            load_config(path, env={})
        self.assertIn("Canvas API Token", str(ctx.exception))

    def test_missing_course_ids_rejected(self) -> None:
        path = self._write_yaml(
            """
            base_host: school.instructure.com
            api_token: abc123
            course_ids: " , "
            """
        )
        with self.assertRaises(ConfigError) as ctx:
            load_config(path, env={})
        self.assertIn("Course IDs", str(ctx.exception))

    def test_config_error_is_value_error(self) -> None:
        path = self._write_yaml("api_token: abc123\n")
        with self.assertRaises(ValueError):
            load_config(path, env={})

    def test_non_mapping_root_rejected(self) -> None:
        path = self._write_yaml("- just\n- a list\n")
        with self.assertRaises(ConfigError):
            load_config(path, env={})

    def test_explicit_missing_file_rejected(self) -> None:
        with self.assertRaises(ConfigError):
            load_config(Path(tempfile.gettempdir()) / "gradehub-does-not-exist.yaml", env={})

    def test_environment_overrides_file(self) -> None:
        path = self._write_yaml(
            """
            base_host: school.instructure.com
            api_token: PASTE_YOUR_TOKEN_HERE
            course_ids: "1"
            """
        )
        config = load_config(
            path,
            env={"CANVAS_API_TOKEN": "from-env", "CANVAS_COURSE_IDS": "7,8", "CANVAS_BASE_URL": "http://other.test"},
        )
        self.assertEqual(config.api_token, "from-env")
        self.assertEqual(config.course_ids, ["7", "8"])
        self.assertEqual(config.base_host, "other.test")

    def test_environment_overrides_settings_labels(self) -> None:
        path = self._write_yaml(
            """
            Canvas Base URL: school.instructure.com
            Canvas API Token: PASTE_YOUR_TOKEN_HERE
            Course IDs (comma-separated): "1"
            """
        )
        config = load_config(path, env={"CANVAS_API_TOKEN": "from-env"})
        self.assertEqual(config.api_token, "from-env")

    def test_configurable_lookback_default(self) -> None:
        path = self._write_yaml(
            """
            base_host: school.instructure.com
            api_token: abc123
            course_ids: "1"
            lookback_hours: "not a number"
            """
        )
        self.assertEqual(load_config(path, env={}).lookback_hours, 24)
        self.assertEqual(load_config(path, default_lookback_hours=48, env={}).lookback_hours, 48)


class ConfigParsingHelperTests(unittest.TestCase):
    def test_normalize_host(self) -> None:
        self.assertEqual(normalize_host("https://school.instructure.com/"), "school.instructure.com")
        self.assertEqual(normalize_host("HTTP://school.instructure.com"), "school.instructure.com")
        self.assertEqual(normalize_host("school.instructure.com"), "school.instructure.com")

    def test_parse_course_ids_keeps_order_and_duplicates(self) -> None:
        self.assertEqual(parse_course_ids("3, 1,, 3 ,2"), ["3", "1", "3", "2"])
        self.assertEqual(parse_course_ids([5, " 6 ", ""]), ["5", "6"])
        self.assertEqual(parse_course_ids(None), [])

    def test_parse_flag(self) -> None:
        for value in ("yes", "Y", "TRUE", " y ", True):
            self.assertTrue(parse_flag(value), value)
        for value in ("no", "", None, "1", "on", False):
            self.assertFalse(parse_flag(value), value)

    def test_parse_hours(self) -> None:
        self.assertEqual(parse_hours("36"), 36)
        self.assertEqual(parse_hours("12 hours"), 12)
        self.assertEqual(parse_hours(72), 72)
        self.assertEqual(parse_hours("0"), 24)
        self.assertEqual(parse_hours("-5", default=48), 48)
        self.assertEqual(parse_hours(None, default=48), 48)
        self.assertEqual(parse_hours("soon"), 24)


def test_example_settings_ship_with_placeholders() -> None:
    """The shipped example must fail until an operator fills in real values."""

    sample_path = REPO_ROOT / "config" / "gradehub.example.yaml"

    try:
        load_config(sample_path, env={})
    except ConfigError as exc:
        assert "Canvas Base URL" in str(exc)
        assert "Canvas API Token" in str(exc)
    else:  # pragma: no cover - guard
        raise AssertionError("placeholder settings should not validate")

    config = load_config(
        sample_path,
        env={"CANVAS_BASE_URL": "school.instructure.com", "CANVAS_API_TOKEN": "token"},
    )
    assert config.course_ids == ["12345", "67890"]
    assert config.highlight_late is True
    assert config.ungraded_only is False
    assert config.missing_time_budget == 330

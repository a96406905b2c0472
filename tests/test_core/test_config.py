"""Unit tests for configuration loading and option models.

Tests cover:
- Default configuration
- YAML parsing of batch, qr and top-level settings
- Error reporting for missing files, bad YAML and bad values
- BatchOptions camelCase contract
- QR render option clamping
"""

import tempfile
import unittest
from pathlib import Path

from linkpack.core.config import AppConfig, load_config, parse_batch_options
from linkpack.core.constants import DedupeMode, OutputType, PrivacyMode
from linkpack.core.exceptions import ConfigError
from linkpack.core.models import BatchOptions, QRRenderOptions


class TestLoadConfig(unittest.TestCase):
    """Test load_config against YAML files."""

    def setUp(self):
        """Create a temporary directory for config files."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.dir = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def _write(self, content: str) -> Path:
        path = self.dir / "linkpack.yaml"
        path.write_text(content, encoding="utf-8")
        return path

    def test_no_file_returns_defaults(self):
        """Test that no path gives the default configuration."""
        config = load_config(None)

        self.assertIsInstance(config, AppConfig)
        self.assertEqual(config.privacy_mode, PrivacyMode.FULL)
        self.assertEqual(config.output_type, OutputType.HTML)
        self.assertEqual(config.archive_name, "links")
        self.assertTrue(config.options.dedupe)
        self.assertEqual(config.options.dedupe_mode, DedupeMode.EXACT)
        self.assertIsNone(config.options.export_fields)

    def test_full_config(self):
        """Test that every documented setting is read."""
        path = self._write(
            "batch:\n"
            "  dedupe: false\n"
            "  dedupe_mode: loose\n"
            "  export_csv: false\n"
            "  export_json: true\n"
            "  export_fields: [raw, host]\n"
            "  qr_png: true\n"
            "  qr_svg: false\n"
            "privacy_mode: stripTracking\n"
            "output_type: webloc\n"
            "archive_name: bookmarks\n"
            "qr:\n"
            "  scale: 4\n"
            "  margin: 2\n"
            "  ecc: h\n"
            "  foreground: '#112233'\n"
        )

        config = load_config(path)

        self.assertFalse(config.options.dedupe)
        self.assertEqual(config.options.dedupe_mode, DedupeMode.LOOSE)
        self.assertFalse(config.options.export_csv)
        self.assertTrue(config.options.export_json)
        self.assertEqual(config.options.export_fields, ["raw", "host"])
        self.assertTrue(config.options.qr_png)
        self.assertFalse(config.options.qr_svg)
        self.assertEqual(config.privacy_mode, PrivacyMode.STRIP_TRACKING)
        self.assertEqual(config.output_type, OutputType.WEBLOC)
        self.assertEqual(config.archive_name, "bookmarks")
        self.assertEqual(config.options.qr_render.scale, 4)
        self.assertEqual(config.options.qr_render.margin, 2)
        self.assertEqual(config.options.qr_render.ecc, "H")
        self.assertEqual(config.options.qr_render.foreground, "#112233")
        self.assertEqual(config.options.qr_render.background, "#ffffff")

    def test_enum_values_are_case_insensitive(self):
        path = self._write("privacy_mode: STRIPALL\noutput_type: URL\n")

        config = load_config(path)

        self.assertEqual(config.privacy_mode, PrivacyMode.STRIP_ALL)
        self.assertEqual(config.output_type, OutputType.URL)

    def test_empty_file_returns_defaults(self):
        path = self._write("")

        config = load_config(path)

        self.assertEqual(config.output_type, OutputType.HTML)

    def test_missing_file_raises(self):
        with self.assertRaises(ConfigError):
            load_config(self.dir / "missing.yaml")

    def test_invalid_yaml_raises(self):
        path = self._write("batch: [unclosed\n")

        with self.assertRaises(ConfigError):
            load_config(path)

    def test_top_level_list_raises(self):
        path = self._write("- a\n- b\n")

        with self.assertRaises(ConfigError):
            load_config(path)

    def test_unknown_enum_value_raises(self):
        path = self._write("batch:\n  dedupe_mode: fuzzy\n")

        with self.assertRaises(ConfigError) as ctx:
            load_config(path)

        self.assertIn("dedupe_mode", str(ctx.exception))

    def test_non_boolean_flag_raises(self):
        path = self._write("batch:\n  dedupe: 'maybe'\n")

        with self.assertRaises(ConfigError):
            load_config(path)

    def test_section_must_be_mapping(self):
        path = self._write("batch: 3\n")

        with self.assertRaises(ConfigError):
            load_config(path)

    def test_blank_archive_name_raises(self):
        path = self._write("archive_name: '  '\n")

        with self.assertRaises(ConfigError):
            load_config(path)


class TestParseBatchOptions(unittest.TestCase):
    """Test parse_batch_options on plain mappings."""

    def test_export_fields_from_comma_string(self):
        options = parse_batch_options({"export_fields": "raw, effectiveUrl ,host"})

        self.assertEqual(options.export_fields, ["raw", "effectiveUrl", "host"])

    def test_export_fields_wrong_type_raises(self):
        with self.assertRaises(ConfigError):
            parse_batch_options({"export_fields": [1, 2]})

    def test_qr_section_is_clamped(self):
        options = parse_batch_options({}, {"scale": 500, "margin": -3, "ecc": "Z"})

        self.assertEqual(options.qr_render.scale, 64)
        self.assertEqual(options.qr_render.margin, 0)
        self.assertEqual(options.qr_render.ecc, "M")


class TestBatchOptionsContract(unittest.TestCase):
    """Test BatchOptions serialization to the camelCase contract."""

    def test_to_dict_uses_camel_case(self):
        data = BatchOptions(dedupe_mode=DedupeMode.AGGRESSIVE, qr_svg=True).to_dict()

        self.assertEqual(data["dedupeMode"], "aggressive")
        self.assertTrue(data["qrSvg"])
        self.assertIn("exportCsv", data)
        self.assertIn("qrRender", data)
        self.assertNotIn("exportFields", data)

    def test_round_trip(self):
        original = BatchOptions(
            dedupe=False,
            dedupe_mode=DedupeMode.LOOSE,
            export_csv=False,
            export_fields=["raw", "query"],
            qr_png=True,
            qr_render=QRRenderOptions(scale=3, transparent=True),
        )

        restored = BatchOptions.from_dict(original.to_dict())

        self.assertEqual(restored, original)

    def test_from_dict_ignores_wrong_types(self):
        options = BatchOptions.from_dict({
            "dedupe": "no",
            "dedupeMode": "fuzzy",
            "exportCsv": 0,
            "exportFields": ["raw", 5],
        })

        self.assertTrue(options.dedupe)
        self.assertEqual(options.dedupe_mode, DedupeMode.EXACT)
        self.assertTrue(options.export_csv)
        self.assertEqual(options.export_fields, ["raw"])

    def test_from_dict_non_mapping(self):
        self.assertEqual(BatchOptions.from_dict(None), BatchOptions())

    def test_wants_qr(self):
        self.assertFalse(BatchOptions().wants_qr)
        self.assertTrue(BatchOptions(qr_png=True).wants_qr)
        self.assertTrue(BatchOptions(qr_svg=True).wants_qr)


class TestQRRenderOptions(unittest.TestCase):
    """Test QR render option defaults and clamping."""

    def test_defaults(self):
        options = QRRenderOptions()

        self.assertEqual(options.scale, 8)
        self.assertEqual(options.margin, 4)
        self.assertEqual(options.ecc, "M")
        self.assertEqual(options.foreground, "#000000")
        self.assertEqual(options.background, "#ffffff")
        self.assertFalse(options.transparent)

    def test_clamping(self):
        options = QRRenderOptions(scale=0, margin=99, ecc="q")

        self.assertEqual(options.scale, 1)
        self.assertEqual(options.margin, 32)
        self.assertEqual(options.ecc, "Q")

    def test_non_numeric_falls_back(self):
        options = QRRenderOptions(scale="big", margin=None)

        self.assertEqual(options.scale, 8)
        self.assertEqual(options.margin, 4)


if __name__ == "__main__":
    unittest.main()

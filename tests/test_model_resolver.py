from __future__ import annotations

import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from lib.model_resolver import ModelResolver
from lib.settings import DEFAULT_MODEL, BriefDeskSettings


class TestModelResolver(unittest.TestCase):
    def setUp(self) -> None:
        self._td = TemporaryDirectory()
        self.defaults_path = Path(self._td.name) / "config" / "model_defaults.yaml"

    def tearDown(self) -> None:
        self._td.cleanup()

    def _resolver(self, **settings) -> ModelResolver:
        return ModelResolver(settings=BriefDeskSettings(model_defaults_path=self.defaults_path, **settings))

    def test_builtin_constant_when_nothing_configured(self) -> None:
        self.assertEqual(self._resolver().resolve_model(), DEFAULT_MODEL)
        self.assertEqual(self._resolver().resolve_model("   "), DEFAULT_MODEL)

    def test_explicit_override_beats_persisted_default(self) -> None:
        r = self._resolver()
        r.set_default("persisted-model")
        self.assertEqual(r.resolve_model("gpt-x"), "gpt-x")

    def test_persisted_default_beats_settings_default(self) -> None:
        r = self._resolver(default_model="settings-model")
        self.assertEqual(r.resolve_model(), "settings-model")

        self.assertTrue(r.set_default("persisted-model"))
        self.assertEqual(r.resolve_model(), "persisted-model")

    def test_default_survives_new_resolver(self) -> None:
        self._resolver().set_default("gpt-saved")
        self.assertEqual(self._resolver().resolve_model(), "gpt-saved")

    def test_blank_default_is_ignored(self) -> None:
        r = self._resolver()
        self.assertFalse(r.set_default(""))
        self.assertFalse(r.set_default("  "))
        self.assertFalse(self.defaults_path.exists())

    def test_corrupted_defaults_file_falls_back(self) -> None:
        self.defaults_path.parent.mkdir(parents=True, exist_ok=True)
        self.defaults_path.write_text("default_model: [unclosed\n", encoding="utf-8")

        self.assertEqual(self._resolver().resolve_model(), DEFAULT_MODEL)

    def test_non_utf8_defaults_file_falls_back_and_heals(self) -> None:
        self.defaults_path.parent.mkdir(parents=True, exist_ok=True)
        self.defaults_path.write_bytes(b"\xff\xfe\x00bad")

        self.assertEqual(self._resolver(default_model="settings-model").resolve_model(), "settings-model")
        self.assertEqual(self.defaults_path.read_text(encoding="utf-8"), "{}\n")

        self._resolver().set_default("gpt-after-heal")
        self.assertEqual(self._resolver().resolve_model(), "gpt-after-heal")

    def test_non_string_default_is_ignored(self) -> None:
        self.defaults_path.parent.mkdir(parents=True, exist_ok=True)
        for raw in ("default_model: [a, b]\n", "default_model: {name: x}\n", "default_model: 42\n"):
            self.defaults_path.write_text(raw, encoding="utf-8")
            self.assertEqual(self._resolver().resolve_model(), DEFAULT_MODEL, msg=raw)

        self.assertEqual(self._resolver().resolve_model(), DEFAULT_MODEL)

    def test_unwritable_defaults_path_is_best_effort(self) -> None:
        # A directory where the file should be makes the write fail.
        self.defaults_path.mkdir(parents=True)
        r = self._resolver()

        self.assertFalse(r.set_default("gpt-y"))
        self.assertEqual(r.resolve_model(), DEFAULT_MODEL)


if __name__ == "__main__":
    unittest.main()

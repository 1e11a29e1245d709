from __future__ import annotations

from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import patch
import io
import os
import tempfile
import textwrap
import unittest

from libdeps.src import cli


class ExportCommandTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.workspace = Path(self.temp_dir.name)
        self.config_dir = self.workspace / "config"
        self.config_dir.mkdir()
        (self.config_dir / "libs.toml").write_text(
            textwrap.dedent(
                """
                [[targets]]
                name = "Foo"
                link_libraries = ["bar", { name = "baz", type = "optimized" }]

                [[targets]]
                name = "bar"
                type = "SHARED_LIBRARY"
                output_name = "realbar"
                """
            )
        )
        self.output = self.workspace / "deps.cmake"
        self.env = patch.dict(os.environ, {}, clear=False)
        self.env.start()
        os.environ.pop("LIBDEPS_CONFIG_DIR", None)

    def tearDown(self) -> None:
        self.env.stop()
        self.temp_dir.cleanup()

    def _run(self, *argv: str) -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = cli.main(["-C", str(self.config_dir), *argv])
        return code, stdout.getvalue(), stderr.getvalue()

    def test_writes_script(self) -> None:
        code, _, stderr = self._run(str(self.output))
        self.assertEqual(code, 0, stderr)
        content = self.output.read_text(encoding="utf-8")
        self.assertIn('set("Foo_LIB_DEPENDS" "general;realbar;optimized;baz;")', content)
        self.assertIn('set("Foo_LIB_DEPENDS" "realbar;baz;")', content)
        self.assertIn('set("baz_LINK_TYPE" "optimized")', content)

    def test_append_mode(self) -> None:
        self.output.write_text("EXISTING", encoding="utf-8")
        code, _, _ = self._run(str(self.output), "APPEND")
        self.assertEqual(code, 0)
        content = self.output.read_text(encoding="utf-8")
        self.assertTrue(content.startswith("EXISTING# Generated by CMake\n"))

    def test_other_marker_overwrites(self) -> None:
        self.output.write_text("EXISTING", encoding="utf-8")
        code, _, _ = self._run(str(self.output), "KEEP")
        self.assertEqual(code, 0)
        self.assertTrue(self.output.read_text(encoding="utf-8").startswith("# Generated by CMake\n"))

    def test_missing_destination_is_usage_error(self) -> None:
        with patch.object(cli, "BuildDescription") as description:
            code, _, stderr = self._run()
        self.assertEqual(code, 1)
        self.assertIn("Error: called with incorrect number of arguments", stderr)
        description.from_directories.assert_not_called()
        self.assertFalse(self.output.exists())

    def test_unwritable_destination_reports_error(self) -> None:
        target = self.workspace / "missing" / "deps.cmake"
        code, _, stderr = self._run(str(target))
        self.assertEqual(code, 1)
        self.assertIn(f"Error: Error Writing {target}", stderr)
        self.assertFalse(target.exists())

    def test_dry_run_prints_script(self) -> None:
        code, stdout, _ = self._run("-n", str(self.output))
        self.assertEqual(code, 0)
        self.assertTrue(stdout.startswith("# Generated by CMake\n"))
        self.assertFalse(self.output.exists())

    def test_verbose_logs_progress(self) -> None:
        code, stdout, _ = self._run("-v", str(self.output))
        self.assertEqual(code, 0)
        self.assertIn("[DEBUG] Foo: 2 link dependencies", stdout)
        self.assertIn(f"[INFO] Wrote library dependencies to {self.output}", stdout)

    def test_dry_run_keeps_log_lines_off_stdout(self) -> None:
        code, stdout, stderr = self._run("-n", "-v", str(self.output))
        self.assertEqual(code, 0, stderr)
        self.assertTrue(stdout.startswith("# Generated by CMake\n"))
        self.assertNotIn("[DEBUG]", stdout)
        self.assertNotIn("[INFO]", stdout)
        self.assertIn("[DEBUG] Foo: 2 link dependencies", stderr)
        self.assertIn(
            f"[INFO] [dry-run] Rendered library dependencies for {self.output}; nothing written",
            stderr,
        )
        self.assertFalse(self.output.exists())

    def test_environment_directories(self) -> None:
        os.environ["LIBDEPS_CONFIG_DIR"] = str(self.config_dir)
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            code = cli.main([str(self.output)])
        self.assertEqual(code, 0, stderr.getvalue())
        self.assertTrue(self.output.exists())

    def test_missing_description_directory(self) -> None:
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            code = cli.main(["-C", str(self.workspace / "absent"), str(self.output)])
        self.assertEqual(code, 1)
        self.assertIn("Description directories not found", stderr.getvalue())


class DirectoryResolutionTests(unittest.TestCase):
    def test_defaults_to_workspace_config(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            directories = cli._resolve_description_directories(Path("/ws"), [])
        self.assertEqual(directories, [Path("/ws/config")])

    def test_splits_path_separated_values(self) -> None:
        value = os.pathsep.join(["a", "/abs/b"])
        with patch.dict(os.environ, {"LIBDEPS_CONFIG_DIR": "env"}, clear=True):
            directories = cli._resolve_description_directories(Path("/ws"), [value])
        self.assertEqual(directories, [Path("/ws/env"), Path("/ws/a"), Path("/abs/b")])


if __name__ == "__main__":
    unittest.main()

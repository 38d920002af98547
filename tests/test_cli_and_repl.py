from __future__ import annotations

import contextlib
import importlib.util
import io
import tempfile
import unittest
from unittest import mock
from pathlib import Path


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


def _scripted(lines: list[str]):
    pending = list(lines)

    def read_line(prompt: str) -> str:
        if not pending:
            raise EOFError
        return pending.pop(0)

    return read_line


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for shell tests")
class ReplTests(unittest.TestCase):
    def test_session_keeps_bindings_between_lines(self) -> None:
        from lala.repl import BANNER, repl

        out = io.StringIO()
        err = io.StringIO()
        env = repl(read_line=_scripted(["x = [1 2; 3 4]", "", "det(x)"]), out=out, err=err)

        lines = out.getvalue().splitlines()
        self.assertEqual(lines[0], BANNER)
        self.assertIn("[1.00 2.00]", lines)
        self.assertIn("-2", lines)
        self.assertEqual(err.getvalue(), "")
        self.assertIn("x", env)

    def test_errors_are_reported_and_session_continues(self) -> None:
        from lala.repl import repl

        out = io.StringIO()
        err = io.StringIO()
        env = repl(read_line=_scripted(["det([1 2 3])", "y = [1]"]), out=out, err=err)

        self.assertTrue(err.getvalue().startswith("error: determinant requires a square matrix"))
        self.assertIn("y", env)

    def test_link_cycle_is_reported_and_session_continues(self) -> None:
        from lala.repl import repl

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "self.la"
            path.write_text(f':link "{path}"\n', encoding="utf-8")
            err = io.StringIO()
            env = repl(read_line=_scripted([f':link "{path}"', "y = [1]"]), out=io.StringIO(), err=err)

        self.assertIn("link cycle", err.getvalue())
        self.assertIn("y", env)

    def test_exit_stops_reading(self) -> None:
        from lala.repl import repl

        out = io.StringIO()
        env = repl(read_line=_scripted(["exit", "x = [1]"]), out=out, err=io.StringIO())
        self.assertNotIn("x", env)


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for command-line tests")
class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write(self, name: str, source: str) -> str:
        path = self.root / name
        path.write_text(source, encoding="utf-8")
        return str(path)

    def _main(self, argv: list[str]) -> tuple[int, str, str]:
        from lala.cli import main

        out = io.StringIO()
        err = io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_runs_script_and_prints_last_result(self) -> None:
        script = self._write("main.la", "x = [2 1; 1 1]\n?x\n")
        code, out, err = self._main([script])
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "[ 1.00 -1.00]\n[-1.00  2.00]")
        self.assertEqual(err, "")

    def test_quiet_suppresses_results(self) -> None:
        script = self._write("main.la", "x = [1]\n")
        code, out, _ = self._main(["-q", script])
        self.assertEqual(code, 0)
        self.assertEqual(out, "")

    def test_link_option_runs_before_scripts(self) -> None:
        lib = self._write("lib.la", "fun double(m) { r = m ++ m; r }\n")
        script = self._write("main.la", "double([1 2])\n")
        code, out, _ = self._main(["--link", lib, script])
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "[2.00 4.00]")

    def test_runtime_failure_exits_nonzero(self) -> None:
        script = self._write("main.la", "inv([1 2; 2 4])\n")
        code, _, err = self._main([script])
        self.assertEqual(code, 1)
        self.assertIn("error: Determinant is zero", err)

    def test_keyboard_interrupt_exits_cleanly(self) -> None:
        with mock.patch("lala.cli.repl", side_effect=KeyboardInterrupt):
            code, out, err = self._main([])
        self.assertEqual(code, 130)
        self.assertIn("Exiting.", out)
        self.assertEqual(err, "")

    def test_missing_script_exits_nonzero(self) -> None:
        code, _, err = self._main([str(self.root / "nope.la")])
        self.assertEqual(code, 1)
        self.assertIn("cannot read", err)


if __name__ == "__main__":
    unittest.main()

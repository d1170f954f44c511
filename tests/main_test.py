import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest import mock

from f1lisp.lang.session import Session
from f1lisp.lang.shell import Shell
from f1lisp.main import main, make_parser


class MainTestCase(unittest.TestCase):

    def setUp(self):
        patcher = mock.patch.dict(os.environ, {"ANSI_COLORS_DISABLED": "1", "NO_COLOR": "1"})
        patcher.start()
        self.addCleanup(patcher.stop)

        directory = tempfile.TemporaryDirectory()
        self.addCleanup(directory.cleanup)
        self.directory = directory.name

    def write_source(self, name, text):
        path = os.path.join(self.directory, name)
        with open(path, "w", encoding="utf-8") as file:
            file.write(text)
        return path

    def run_main(self, *argv):
        out = io.StringIO()
        with redirect_stdout(out):
            status = main(list(argv))
        return status, out.getvalue()

    def test_parser(self):
        self.assertEqual([], make_parser().parse_args([]).files)
        self.assertEqual(["a.lisp", "b.lisp"], make_parser().parse_args(["a.lisp", "b.lisp"]).files)

    def test_file(self):
        path = self.write_source("ok.lisp", "(define x 6)\n(print x)\n(* x 7)\n")
        status, output = self.run_main(path)
        self.assertEqual(0, status)
        self.assertEqual("6\n ~> 42\n", output)

    def test_failing_file(self):
        bad = self.write_source("bad.lisp", "(define x 1)\n(/ x 0)\n")
        good = self.write_source("good.lisp", "x\n")
        status, output = self.run_main(bad, good, bad)

        self.assertEqual(1, status)
        self.assertEqual(3, output.count(" !! error: "))
        self.assertIn(f"  File '{bad}', line 2:\n    (/ x 0)\n !! error: /: division by zero", output)
        self.assertIn("undefined symbol 'x'", output)

    def test_missing_file(self):
        status, output = self.run_main(os.path.join(self.directory, "missing.lisp"))
        self.assertEqual(1, status)
        self.assertIn("could not be opened", output)

    def test_exit(self):
        path = self.write_source("exit.lisp", "(print 1)\n(exit 3)\n(print 2)\n")
        out = io.StringIO()
        with redirect_stdout(out), self.assertRaises(SystemExit) as ctx:
            main([path])
        self.assertEqual(3, ctx.exception.code)
        self.assertEqual("1\n", out.getvalue())

    def test_internal_error_reported_once(self):
        out = io.StringIO()
        with mock.patch.object(Session, "__init__", side_effect=ZeroDivisionError("boom")):
            with redirect_stdout(out), self.assertRaises(ZeroDivisionError):
                main(["x.lisp"])
        self.assertEqual(1, out.getvalue().count(" !! [internal] error: unknown error: 'ZeroDivisionError: boom'"))

    def test_shell(self):
        with mock.patch.object(Shell, "cmdloop") as cmdloop:
            status, __ = self.run_main()
        cmdloop.assert_called_once_with()
        self.assertEqual(0, status)


if __name__ == '__main__':
    unittest.main()

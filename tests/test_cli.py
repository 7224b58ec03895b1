# tests/test_cli.py
import io
import json
import os
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

from piedpiper import cli


def make_tree(root: Path, files: dict) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


def snapshot(folder: Path) -> dict:
    return {p.name: p.read_bytes() for p in sorted(folder.iterdir())}


class TestRun(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.project = Path(self._tmp.name)
        self.pipe = self.project / "pipe"
        make_tree(self.project, {
            "README.md": "# project",
            "functions/fetchTournaments/fetchTournaments.js": "fetch()",
            "functions/deploy/index.js": "deploy()",
            "firestore/firestore.rules": "rules_version = '2';",
            "scripts/run": "#!/bin/sh",
            "app.log": "noise",
        })

    def tearDown(self):
        self._tmp.cleanup()

    def run_cli(self, **kwargs):
        out = io.StringIO()
        with redirect_stdout(out):
            code = cli.run(self.project, self.project, **kwargs)
        return code, out.getvalue()

    def test_full_run(self):
        code, out = self.run_cli()

        self.assertEqual(code, 0)
        self.assertIn("[OK] File organization complete", out)
        self.assertEqual(
            sorted(snapshot(self.pipe)),
            [
                "README.md",
                "firestore_firestore.rules.txt",
                "functions_deploy_index.js",
                "functions_fetchTournaments_fetchTournaments.js",
                "scripts_run.txt",
            ],
        )
        # README.md in the output is the generated summary, not the project's
        summary = (self.pipe / "README.md").read_text()
        self.assertIn("# pipe Folder Overview", summary)
        self.assertIn("node_modules, pipe, .git, dist", summary)
        self.assertIn("`scripts_run.txt` <- `scripts/run`", summary)
        self.assertNotIn("## Filter", summary)

    def test_second_run_gives_same_output(self):
        self.run_cli()
        first = snapshot(self.pipe)
        (self.pipe / "leftover.txt").write_text("from somewhere else")
        self.run_cli()
        self.assertEqual(snapshot(self.pipe), first)

    def test_filter_token_is_applied_and_echoed(self):
        code, _ = self.run_cli(filter_token="fetch")

        self.assertEqual(code, 0)
        self.assertEqual(
            sorted(snapshot(self.pipe)),
            ["README.md", "functions_fetchTournaments_fetchTournaments.js"],
        )
        self.assertIn('Only files containing "fetch"', (self.pipe / "README.md").read_text())

    def test_config_file_changes_target(self):
        (self.project / ".piedpiper.json").write_text(json.dumps({
            "targetFolder": "flat",
            "ignoredFolders": ["flat", "functions"],
        }))
        self.run_cli()
        flat = self.project / "flat"
        self.assertEqual(
            sorted(snapshot(flat)),
            [".piedpiper.json", "README.md", "firestore_firestore.rules.txt", "scripts_run.txt"],
        )
        self.assertFalse(self.pipe.exists())

    def test_copied_readme_replaced_by_summary_is_reported(self):
        (self.project / ".piedpiper.json").write_text(json.dumps({"ignoredFiles": []}))
        code, out = self.run_cli()

        self.assertEqual(code, 0)
        # .piedpiper.json plus the four project files; README.md is not counted
        self.assertIn("Copied:  5 file(s)", out)
        self.assertIn("Collisions: 1", out)
        summary = (self.pipe / "README.md").read_text()
        self.assertIn("# pipe Folder Overview", summary)
        self.assertNotIn("`README.md` <- `README.md`", summary)
        self.assertIn("## Name Collisions", summary)

    def test_reset_failure_aborts(self):
        self.pipe.write_text("a file where the folder should be")
        code, out = self.run_cli()
        self.assertEqual(code, 1)
        self.assertIn("[ABORT]", out)

    def test_strict_mode_fails_on_skipped_errors(self):
        real_copyfile = shutil.copyfile

        def copyfile(src, dst):
            if Path(src).name == "index.js":
                raise PermissionError(13, "Permission denied")
            return real_copyfile(src, dst)

        with mock.patch("piedpiper.walker.shutil.copyfile", copyfile):
            lenient, _ = self.run_cli()
            strict, out = self.run_cli(strict=True)

        self.assertEqual(lenient, 0)
        self.assertEqual(strict, 1)
        self.assertIn("1 on error", out)
        self.assertIn("## Skipped On Error", (self.pipe / "README.md").read_text())


class TestMain(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.project = Path(self._tmp.name)
        self._cwd = os.getcwd()
        os.chdir(self.project)

    def tearDown(self):
        os.chdir(self._cwd)
        self._tmp.cleanup()

    def test_main_uses_working_directory(self):
        make_tree(self.project, {"src/main.py": "print()"})
        with redirect_stdout(io.StringIO()):
            code = cli.main(["-q"])
        self.assertEqual(code, 0)
        self.assertTrue((self.project / "pipe" / "src_main.py").is_file())

    def test_root_option(self):
        make_tree(self.project, {"elsewhere/lib/util.py": "x"})
        with redirect_stdout(io.StringIO()):
            code = cli.main(["-q", "--root", "elsewhere"])
        self.assertEqual(code, 0)
        self.assertTrue((self.project / "pipe" / "lib_util.py").is_file())


if __name__ == "__main__":
    unittest.main()

# tests/test_output_folder.py
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from piedpiper.errors import DestinationResetError
from piedpiper.output_folder import reset_target_folder


class TestResetTargetFolder(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_creates_missing_folder(self):
        target = self.tmp / "pipe"
        reset_target_folder(target)
        self.assertTrue(target.is_dir())
        self.assertEqual(list(target.iterdir()), [])

    def test_clears_existing_folder_in_place(self):
        target = self.tmp / "pipe"
        target.mkdir()
        (target / "old.txt").write_text("stale")
        (target / "nested").mkdir()
        (target / "nested" / "deep.txt").write_text("stale")

        reset_target_folder(target)

        self.assertTrue(target.is_dir())
        self.assertEqual(list(target.iterdir()), [])

    def test_reset_is_idempotent(self):
        target = self.tmp / "pipe"
        reset_target_folder(target)
        reset_target_folder(target)
        self.assertEqual(list(target.iterdir()), [])

    def test_file_in_the_way_is_fatal(self):
        target = self.tmp / "pipe"
        target.write_text("not a folder")
        with self.assertRaises(DestinationResetError):
            reset_target_folder(target)

    def test_refuses_to_clear_the_source_root(self):
        (self.tmp / "keep.py").write_text("x")
        with self.assertRaises(DestinationResetError):
            reset_target_folder(self.tmp, source_root=self.tmp)
        with self.assertRaises(DestinationResetError):
            reset_target_folder(self.tmp, source_root=self.tmp / "sub")
        self.assertTrue((self.tmp / "keep.py").exists())

    def test_undeletable_entry_aborts(self):
        target = self.tmp / "pipe"
        target.mkdir()
        (target / "locked.txt").write_text("x")

        with mock.patch.object(Path, "unlink", side_effect=PermissionError(13, "Permission denied")):
            with self.assertRaises(DestinationResetError):
                reset_target_folder(target)


if __name__ == "__main__":
    unittest.main()

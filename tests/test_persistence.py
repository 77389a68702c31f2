import unittest
import os
import json
import shutil
import tempfile
from unittest.mock import patch
from artworks.core.persistence import PersistenceManager, SelectionStore, SELECTION_KEY

class TestPersistenceManager(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.pm = PersistenceManager(data_dir=self.test_dir)

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_missing_file_is_empty_state(self):
        self.assertEqual(self.pm.read_state(), {})
        self.assertEqual(self.pm.load_ui_state(), {})

    def test_save_ui_state_merges_keys(self):
        self.pm.save_ui_state({'artworks_first': 24})
        self.pm.save_ui_state({'artworks_rows': 12})
        self.assertEqual(self.pm.load_ui_state(), {'artworks_first': 24, 'artworks_rows': 12})

    def test_write_leaves_no_temp_files(self):
        self.pm.write_state({'a': 1})
        self.assertEqual(os.listdir(self.test_dir), ['ui_state.json'])

    def test_failed_write_removes_temp_file_and_keeps_old_content(self):
        self.pm.write_state({'a': 1})
        with patch('artworks.core.persistence.os.replace', side_effect=OSError("disk full")):
            with self.assertRaises(OSError):
                self.pm.write_state({'a': 2})

        self.assertEqual(os.listdir(self.test_dir), ['ui_state.json'])
        self.assertEqual(self.pm.read_state(), {'a': 1})

    def test_yaml_state_file(self):
        pm = PersistenceManager(data_dir=self.test_dir, state_file="state.yaml")
        pm.write_state({SELECTION_KEY: [1, 2]})
        with open(os.path.join(self.test_dir, "state.yaml"), 'r', encoding='utf-8') as f:
            self.assertIn("selected_artworks", f.read())
        self.assertEqual(pm.read_state(), {SELECTION_KEY: [1, 2]})

    def test_corrupt_ui_state_is_empty(self):
        with open(self.pm.filepath, 'w', encoding='utf-8') as f:
            f.write("[1, 2")
        self.assertEqual(self.pm.load_ui_state(), {})


class TestSelectionStore(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.pm = PersistenceManager(data_dir=self.test_dir)
        self.store = SelectionStore(self.pm)

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _stored(self):
        with open(self.pm.filepath, 'r', encoding='utf-8') as f:
            return json.load(f)

    def test_load_without_data_is_empty(self):
        self.assertEqual(self.store.load(), set())

    def test_merge_is_idempotent(self):
        self.store.merge({1, 2})
        once = self.store.ids
        self.store.merge({1, 2})
        self.assertEqual(self.store.ids, once)
        self.assertEqual(self._stored()[SELECTION_KEY], [1, 2])

    def test_merge_never_removes(self):
        self.store.merge({1, 2, 3})
        self.store.merge({4})
        self.store.merge(set())
        self.assertEqual(self.store.ids, {1, 2, 3, 4})

    def test_save_then_load_in_fresh_store(self):
        self.store.save({7, 3, 42})
        fresh = SelectionStore(PersistenceManager(data_dir=self.test_dir))
        self.assertEqual(fresh.load(), {3, 7, 42})

    def test_save_replaces_contents(self):
        self.store.merge({1, 2, 3})
        self.store.save({9})
        self.assertEqual(self._stored()[SELECTION_KEY], [9])

    def test_writes_keep_other_keys(self):
        self.pm.save_ui_state({'artworks_first': 12})
        self.store.merge({5})
        self.assertEqual(self._stored(), {'artworks_first': 12, SELECTION_KEY: [5]})

    def test_corrupt_file_starts_empty(self):
        with open(self.pm.filepath, 'w', encoding='utf-8') as f:
            f.write("{broken")
        self.assertEqual(self.store.load(), set())

        # The next merge replaces the unreadable file
        self.store.merge({8})
        self.assertEqual(self._stored(), {SELECTION_KEY: [8]})

    def test_wrong_type_under_key_starts_empty(self):
        self.pm.write_state({SELECTION_KEY: {"7": True}})
        self.assertEqual(self.store.load(), set())

    def test_invalid_entries_are_skipped(self):
        self.pm.write_state({SELECTION_KEY: [1, "2", "x", None, True, 3.5]})
        self.assertEqual(self.store.load(), {1, 2})

    def test_discard_and_clear(self):
        self.store.merge({1, 2, 3})
        self.store.discard({2, 99})
        self.assertEqual(self.store.ids, {1, 3})
        self.store.clear()
        self.assertEqual(len(self.store), 0)
        self.assertEqual(self._stored()[SELECTION_KEY], [])

    def test_merge_before_load_keeps_stored_ids(self):
        self.store.save({1, 2, 3})

        other = SelectionStore(self.pm)
        self.assertEqual(other.merge({9}), {1, 2, 3, 9})

        fresh = SelectionStore(PersistenceManager(data_dir=self.test_dir))
        self.assertEqual(fresh.load(), {1, 2, 3, 9})

    def test_discard_before_load_keeps_other_stored_ids(self):
        self.store.save({1, 2, 3})

        other = SelectionStore(self.pm)
        other.discard({2})
        self.assertEqual(self._stored()[SELECTION_KEY], [1, 3])

    def test_failed_write_leaves_selection_unchanged(self):
        self.store.merge({1, 2})
        with patch('artworks.core.persistence.os.replace', side_effect=OSError("disk full")):
            with self.assertRaises(OSError):
                self.store.merge({5})
            with self.assertRaises(OSError):
                self.store.discard({1})
            with self.assertRaises(OSError):
                self.store.clear()

        self.assertEqual(self.store.ids, {1, 2})
        self.assertNotIn(5, self.store)
        self.assertEqual(self._stored()[SELECTION_KEY], [1, 2])

    def test_contains(self):
        self.store.merge({7})
        self.assertIn(7, self.store)
        self.assertNotIn(8, self.store)

if __name__ == '__main__':
    unittest.main()

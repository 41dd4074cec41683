# --- tests/delete_ops_test.py ---

import os
import sys
import tempfile
import time
import unittest
from unittest import mock

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import delete_ops
from delete_ops import CleanupSession, CleanupState, clean
from models import FileObservation, ScanPolicy
from scanner import scan


class CleanupTestCase(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def make_finding(self, name: str, recorded_size: int = 100) -> FileObservation:
        path = os.path.join(self.root, name)
        with open(path, 'wb') as f:
            f.write(b"x" * 10)
        return FileObservation(path=path, size_bytes=recorded_size, modified_at=0.0)

    def make_dir_finding(self, name: str, recorded_size: int = 4096) -> FileObservation:
        path = os.path.join(self.root, name)
        os.makedirs(os.path.join(path, "nested"))
        with open(os.path.join(path, "nested", "inner.tmp"), 'wb') as f:
            f.write(b"y")
        return FileObservation(path=path, size_bytes=recorded_size, modified_at=0.0, is_directory=True)

    def listing(self):
        return sorted(os.listdir(self.root))


class TestDryRunAndDecline(CleanupTestCase):

    def test_dry_run_never_deletes(self):
        findings = [self.make_finding("a.tmp"), self.make_dir_finding("cache")]
        before = self.listing()

        for answer in ("yes", "YES", "no", ""):
            with self.subTest(answer=answer):
                confirm = mock.Mock(return_value=answer)
                session = CleanupSession(findings, confirm, dry_run=True)
                outcome = session.run()

                self.assertEqual(outcome.as_tuple(), (0, 0, 0))
                self.assertIs(session.state, CleanupState.REPORTED)
                confirm.assert_not_called()
                self.assertEqual(self.listing(), before)

    def test_non_matching_answers_decline(self):
        findings = [self.make_finding("a.tmp"), self.make_finding("b.tmp")]
        before = self.listing()

        for answer in ("y", "", "YES please", "no", "yess", None):
            with self.subTest(answer=answer):
                confirm = mock.Mock(return_value=answer)
                session = CleanupSession(findings, confirm, dry_run=False)
                outcome = session.run()

                self.assertEqual(outcome.as_tuple(), (0, 0, 0))
                self.assertIs(session.state, CleanupState.DECLINED)
                self.assertEqual(session.history, [
                    CleanupState.SCANNED,
                    CleanupState.AWAITING_CONFIRMATION,
                    CleanupState.DECLINED,
                ])
                confirm.assert_called_once()
                self.assertEqual(self.listing(), before)

    def test_aborted_prompt_declines(self):
        finding = self.make_finding("a.tmp")

        for error in (EOFError(), KeyboardInterrupt()):
            with self.subTest(error=type(error).__name__):
                confirm = mock.Mock(side_effect=error)
                outcome = clean([finding], confirm, dry_run=False)
                self.assertEqual(outcome.as_tuple(), (0, 0, 0))
                self.assertTrue(os.path.exists(finding.path))

    def test_empty_findings_skip_prompt(self):
        confirm = mock.Mock(return_value="yes")
        session = CleanupSession([], confirm, dry_run=False)

        outcome = session.run()

        self.assertEqual(outcome.as_tuple(), (0, 0, 0))
        self.assertIs(session.state, CleanupState.DONE)
        confirm.assert_not_called()


class TestDeletion(CleanupTestCase):

    def test_confirmed_cleanup_removes_files_and_directories(self):
        file_finding = self.make_finding("old.tmp", recorded_size=10)
        dir_finding = self.make_dir_finding("old_cache", recorded_size=4096)
        keep = self.make_finding("keep.txt")

        confirm = mock.Mock(return_value="  Yes ")
        session = CleanupSession([file_finding, dir_finding], confirm, dry_run=False)
        outcome = session.run()

        self.assertEqual(outcome.as_tuple(), (2, 4106, 0))
        self.assertEqual(session.history, [
            CleanupState.SCANNED,
            CleanupState.AWAITING_CONFIRMATION,
            CleanupState.CONFIRMED,
            CleanupState.DELETING,
            CleanupState.DONE,
        ])
        self.assertTrue(session.finished)
        self.assertFalse(os.path.exists(file_finding.path))
        self.assertFalse(os.path.exists(dir_finding.path))
        self.assertTrue(os.path.exists(keep.path))

        prompt = confirm.call_args[0][0]
        self.assertIn("Delete 2 items", prompt)

    def test_one_failure_does_not_stop_the_rest(self):
        first = self.make_finding("one.tmp", recorded_size=100)
        broken = self.make_finding("two.tmp", recorded_size=200)
        third = self.make_finding("three.tmp", recorded_size=300)
        os.remove(broken.path)

        events = []
        outcome = clean(
            [first, broken, third],
            lambda prompt: "yes",
            dry_run=False,
            progress_callback=lambda path, is_error, msg: events.append((path, is_error)),
        )

        self.assertEqual(outcome.deleted_count, 2)
        self.assertEqual(outcome.error_count, 1)
        # Sizes recorded at scan time, not the 10 bytes actually on disk
        self.assertEqual(outcome.freed_bytes, 400)
        self.assertEqual(len(outcome.errors), 1)
        self.assertIn(broken.path, outcome.errors[0])
        self.assertEqual(events, [(first.path, False), (broken.path, True), (third.path, False)])
        self.assertEqual(self.listing(), [])

    def test_failure_is_logged(self):
        missing = FileObservation(path=os.path.join(self.root, "ghost.tmp"), size_bytes=1, modified_at=0.0)

        with self.assertLogs("delete_ops", level="WARNING") as logs:
            outcome = clean([missing], lambda prompt: "yes", dry_run=False)

        self.assertEqual(outcome.as_tuple(), (0, 0, 1))
        self.assertIn("ghost.tmp", logs.output[0])

    def test_custom_accept_phrase(self):
        finding = self.make_finding("a.tmp")

        declined = clean([finding], lambda prompt: "yes", dry_run=False, accept_phrase="delete")
        self.assertEqual(declined.as_tuple(), (0, 0, 0))

        accepted = clean([finding], lambda prompt: "DELETE", dry_run=False, accept_phrase="delete")
        self.assertEqual(accepted.as_tuple(), (1, 100, 0))

    def test_trash_mode_uses_send2trash(self):
        finding = self.make_finding("a.tmp", recorded_size=42)

        with mock.patch.object(delete_ops, "send2trash") as trash:
            outcome = clean([finding], lambda prompt: "yes", dry_run=False, use_trash=True)

        trash.assert_called_once_with(finding.path)
        self.assertEqual(outcome.as_tuple(), (1, 42, 0))

    def test_session_runs_once(self):
        session = CleanupSession([self.make_finding("a.tmp")], lambda prompt: "no", dry_run=False)
        session.run()
        with self.assertRaises(RuntimeError):
            session.run()


class TestScanThenClean(CleanupTestCase):

    def test_rerun_after_cleanup_finds_nothing(self):
        now = time.time()
        old = now - 10 * 86400
        for name in ("stale.log", "stale.tmp"):
            path = os.path.join(self.root, name)
            with open(path, 'wb') as f:
                f.write(b"z" * 64)
            os.utime(path, (old, old))
        stale_dir = os.path.join(self.root, "stale_dir")
        os.makedirs(stale_dir)
        os.utime(stale_dir, (old, old))
        with open(os.path.join(self.root, "fresh.txt"), 'wb') as f:
            f.write(b"f")

        policy = ScanPolicy.cleanup(max_age_seconds=7 * 86400, reference_time=now)
        findings = scan(self.root, policy).candidate_findings
        self.assertEqual(len(findings), 3)

        # Dry runs are repeatable and leave everything in place
        for _ in range(2):
            self.assertEqual(clean(findings, lambda prompt: "yes", dry_run=True).as_tuple(), (0, 0, 0))
            self.assertEqual(scan(self.root, policy).candidate_findings, findings)

        outcome = clean(findings, lambda prompt: "yes", dry_run=False)
        self.assertEqual(outcome.deleted_count, 3)
        self.assertEqual(outcome.error_count, 0)

        self.assertEqual(scan(self.root, policy).candidate_findings, [])
        self.assertEqual(self.listing(), ["fresh.txt"])


if __name__ == "__main__":
    unittest.main()

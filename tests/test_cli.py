import json
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock, patch

from click.testing import CliRunner

import vc_unified.cli as cli
from vc_unified import __version__
from vc_unified.common.models import Commit, Credentials, FileInfo, FileKind, Status
from vc_unified.common.pointer import Pointer
from vc_unified.exceptions import ExecutionError, NotFoundError

BASE_ARGS = ["--vcs", "svn", "--url", "svn://example.com/repo"]


class TestFormatEntry(unittest.TestCase):
    def test_format_entry(self) -> None:
        self.assertEqual(cli.format_entry(FileInfo("src", FileKind.DIR, "12")), "        12  src/")
        self.assertEqual(
            cli.format_entry(FileInfo("a.txt", FileKind.FILE, None, Status.MODIFIED)),
            "M           a.txt",
        )


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()
        self.client = Mock()
        self.client.pointer = Pointer.trunk()
        patcher = patch.object(cli, "create_client", return_value=self.client)
        self.create_client = patcher.start()
        self.addCleanup(patcher.stop)

    def invoke(self, *args):
        return self.runner.invoke(cli.main, BASE_ARGS + list(args))

    def test_ls(self) -> None:
        self.client.ls.return_value = [FileInfo("src", FileKind.DIR, "3"), FileInfo("a.txt", FileKind.FILE, "2")]
        result = self.invoke("ls", "docs")
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.client.ls.assert_called_once_with("docs")
        self.assertIn("src/", result.output)
        self.assertIn("a.txt", result.output)
        self.client.close.assert_called_once()

    def test_client_options(self) -> None:
        result = self.invoke("--tag", "v1.0", "--username", "alice", "--password", "secret", "cat", "a.txt")
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        args, kwargs = self.create_client.call_args
        self.assertEqual(args, ("svn", "svn://example.com/repo"))
        self.assertEqual(kwargs["pointer"], Pointer.tag("v1.0"))
        self.assertEqual(kwargs["credentials"], Credentials("alice", "secret"))
        self.assertIsNone(kwargs["working_copy"])

    def test_branch_option(self) -> None:
        self.invoke("--branch", "feature1", "branches")
        self.assertEqual(self.create_client.call_args[1]["pointer"], Pointer.branch("feature1"))

    def test_branch_and_tag_conflict(self) -> None:
        result = self.invoke("--branch", "b", "--tag", "t", "ls")
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)
        self.create_client.assert_not_called()

    def test_missing_vcs_or_url(self) -> None:
        result = self.runner.invoke(cli.main, ["--url", "svn://example.com/repo", "ls"])
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)
        result = self.runner.invoke(cli.main, ["--vcs", "git", "ls"])
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)

    def test_vcs_and_options_from_config(self) -> None:
        self.client.tags.return_value = ["v1.0"]
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(json.dumps({"vcs": "git", "trunk_branch": "main", "username": "bob"}))
            result = self.runner.invoke(
                cli.main, ["--config", str(path), "--url", "https://example.com/r.git", "tags"]
            )
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        args, kwargs = self.create_client.call_args
        self.assertEqual(args[0], "git")
        self.assertEqual(kwargs["trunk_branch"], "main")
        self.assertEqual(kwargs["credentials"], Credentials("bob", None))
        self.assertEqual(result.output.splitlines(), ["v1.0"])

    def test_invalid_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{broken")
            result = self.runner.invoke(cli.main, ["--config", str(path)] + BASE_ARGS + ["ls"])
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)

    def test_not_found(self) -> None:
        self.client.cat.side_effect = NotFoundError("svn: E200009: File not found")
        result = self.invoke("cat", "missing.txt")
        self.assertEqual(result.exit_code, cli.EXIT_NOT_FOUND)
        self.client.close.assert_called_once()

    def test_vcs_failure(self) -> None:
        self.client.log.side_effect = ExecutionError("svn: E170013: Unable to connect")
        result = self.invoke("log")
        self.assertEqual(result.exit_code, cli.EXIT_VCS_FAILURE)

    def test_unexpected_error(self) -> None:
        self.client.tags.side_effect = RuntimeError("boom")
        result = self.invoke("tags")
        self.assertEqual(result.exit_code, cli.EXIT_GENERIC_ERROR)

    def test_cat_prints_content(self) -> None:
        self.client.cat.return_value = "line 1\nline 2\n"
        result = self.invoke("cat", "a.txt")
        self.assertEqual(result.output, "line 1\nline 2\n")

    def test_log(self) -> None:
        self.client.log.return_value = [
            Commit("7", "alice", datetime(2013, 1, 2, tzinfo=timezone.utc), "Fix\nDetails", ("/trunk/a.txt",)),
            Commit("1", "", None, "Initial"),
        ]
        result = self.invoke("log", "a.txt")
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("alice", result.output)
        self.assertIn("    Details", result.output)
        self.assertIn("/trunk/a.txt", result.output)

    def test_checkout_and_export(self) -> None:
        result = self.invoke("checkout", "wc")
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.client.checkout.assert_called_once_with(Path("wc"))
        result = self.invoke("export", "/", "out")
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.client.export.assert_called_once_with("/", Path("out"))

    def test_status_add_commit(self) -> None:
        self.client.status.return_value = []
        result = self.invoke("--working-copy", "wc", "status")
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("clean", result.output)
        self.assertEqual(self.create_client.call_args[1]["working_copy"], Path("wc"))

        result = self.invoke("--working-copy", "wc", "add", "a.txt", "b.txt")
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertEqual([c[0][0] for c in self.client.add.call_args_list], ["a.txt", "b.txt"])

        result = self.invoke("--working-copy", "wc", "commit", "-m", "Add files")
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.client.commit.assert_called_once_with("Add files")

    def test_commit_requires_message(self) -> None:
        result = self.invoke("commit")
        self.assertNotEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.client.commit.assert_not_called()

    def test_diff(self) -> None:
        self.client.diff.return_value = [FileInfo("a.txt", FileKind.FILE, None, Status.MODIFIED)]
        result = self.invoke("diff", "a.txt", "--from", "3")
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.client.diff.assert_called_once_with("a.txt", "a.txt", "3", None)
        self.assertIn("a.txt", result.output)

    def test_branches(self) -> None:
        self.client.branches.return_value = ["feature1", "feature2"]
        result = self.invoke("branches")
        self.assertEqual(result.output.splitlines(), ["feature1", "feature2"])

    def test_version(self) -> None:
        result = self.runner.invoke(cli.main, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)


if __name__ == "__main__":
    unittest.main()

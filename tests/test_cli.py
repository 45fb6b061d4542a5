import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch
from click.testing import CliRunner

from contexter.api import ApiError
from contexter.models import Project

# Import the main entry point
from contexter.main import cli

FILES = ["README.md", "src/app.py", "src/lib/util.py", "__pycache__/x.pyc"]


class TestContexterCLI(unittest.TestCase):
    def setUp(self):
        """
        Point the settings at a temporary directory and fake the server client.
        """
        self.test_dir = tempfile.mkdtemp()
        self.config = str(Path(self.test_dir) / "settings.json")
        self.runner = CliRunner()

        patcher = patch("contexter.main.ContexterApi")
        self.api_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.api = self.api_cls.return_value
        self.api.fetch_project_metadata.return_value = Project(name="demo", path="/srv/demo", files=FILES)
        self.api.fetch_project_content.return_value = "# README.md\nhello"

    def tearDown(self):
        """Clean up the temporary directory after each test."""
        shutil.rmtree(self.test_dir)

    def invoke(self, *args):
        return self.runner.invoke(cli, ["--config", self.config, *args])

    def test_projects_lists_names(self):
        self.api.fetch_projects.return_value = [Project(name="demo", files=FILES)]
        result = self.invoke("projects")
        self.assertEqual(result.exit_code, 0)
        self.assertIn("demo\t4 files", result.output)

    def test_api_error_becomes_click_error(self):
        self.api.fetch_projects.side_effect = ApiError("API Key or Server URL is missing")
        result = self.invoke("projects")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("API Key or Server URL is missing", result.output)

    def test_files_prints_tree_without_excluded(self):
        result = self.invoke("files", "demo")
        self.assertEqual(result.exit_code, 0)
        self.assertIn("└── src/", result.output)
        self.assertIn("util.py", result.output)
        self.assertNotIn("__pycache__", result.output)

    def test_files_search(self):
        result = self.invoke("files", "demo", "-s", "UTIL")
        self.assertEqual(result.exit_code, 0)
        self.assertIn("util.py", result.output)
        self.assertNotIn("README.md", result.output)

    def test_fetch_plans_against_unfiltered_file_list(self):
        result = self.invoke("fetch", "demo")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("hello", result.output)
        name, selected, all_files = self.api.fetch_project_content.call_args.args
        self.assertEqual(name, "demo")
        self.assertEqual(selected, ["README.md", "src/app.py", "src/lib/util.py"])
        # the always-on excludes dropped a file, so the lists must differ
        self.assertEqual(all_files, FILES)
        self.assertNotEqual(len(selected), len(all_files))

    def test_fetch_directory_path_selects_its_files(self):
        result = self.invoke("fetch", "demo", "-p", "src/")
        self.assertEqual(result.exit_code, 0, result.output)
        _, selected, _ = self.api.fetch_project_content.call_args.args
        self.assertEqual(selected, ["src/app.py", "src/lib/util.py"])

    def test_fetch_unknown_path_is_an_error(self):
        result = self.invoke("fetch", "demo", "-p", "nowhere")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("No files selected", result.output)
        self.api.fetch_project_content.assert_not_called()

    def test_fetch_empty_content_is_an_error(self):
        self.api.fetch_project_content.return_value = ""
        result = self.invoke("fetch", "demo")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("No content received from server", result.output)

    def test_fetch_writes_output_file(self):
        target = Path(self.test_dir) / "out.txt"
        result = self.invoke("fetch", "demo", "-o", str(target))
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(target.read_text(encoding="utf-8"), "# README.md\nhello")

    def test_fetch_download_uses_project_name(self):
        with self.runner.isolated_filesystem(temp_dir=self.test_dir):
            result = self.invoke("fetch", "demo", "--download")
            self.assertEqual(result.exit_code, 0, result.output)
            self.assertTrue(Path("demo-context.txt").is_file())

    def test_fetch_copy(self):
        with patch("contexter.main.copy_to_clipboard", return_value=True) as copy:
            result = self.invoke("fetch", "demo", "-c")
        self.assertEqual(result.exit_code, 0, result.output)
        copy.assert_called_once_with("# README.md\nhello")

    def test_fetch_interactive_uses_textual_picker(self):
        with patch("contexter.main.TextualPicker") as picker_cls:
            picker_cls.return_value.pick.return_value = ["README.md"]
            result = self.invoke("fetch", "demo", "-i")
        self.assertEqual(result.exit_code, 0, result.output)
        picker_cls.return_value.pick.assert_called_once()
        _, selected, _ = self.api.fetch_project_content.call_args.args
        self.assertEqual(selected, ["README.md"])

    def test_fetch_interactive_abort(self):
        with patch("contexter.main.TextualPicker") as picker_cls:
            picker_cls.return_value.pick.return_value = []
            result = self.invoke("fetch", "demo", "-i")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("No files selected", result.output)

    def test_config_set_and_show(self):
        result = self.invoke("config", "set", "--api-key", "sekrit-key-123", "--server-url", "http://h:1/")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue(Path(self.config).is_file())

        result = self.invoke("config", "show")
        self.assertIn("server_url: http://h:1", result.output)
        self.assertIn("api_key:    ********", result.output)
        self.assertNotIn("sekrit-key-123", result.output)

    def test_config_set_does_not_persist_env_overrides(self):
        with patch.dict(os.environ, {"CONTEXTER_API_KEY": "env-secret"}):
            result = self.invoke("config", "set", "--theme", "dark")
        self.assertEqual(result.exit_code, 0, result.output)
        saved = json.loads(Path(self.config).read_text(encoding="utf-8"))
        self.assertEqual(saved["theme"], "dark")
        self.assertEqual(saved["api_key"], "")
        self.assertNotIn("env-secret", Path(self.config).read_text(encoding="utf-8"))

    def test_config_set_keeps_existing_file_values(self):
        self.invoke("config", "set", "--api-key", "stored-key")
        with patch.dict(os.environ, {"CONTEXTER_SERVER_URL": "http://env:9"}):
            self.invoke("config", "set", "--theme", "light")
        saved = json.loads(Path(self.config).read_text(encoding="utf-8"))
        self.assertEqual(saved["api_key"], "stored-key")
        self.assertEqual(saved["server_url"], "http://localhost:3030")

    def test_config_validate(self):
        self.api.validate_api_key.return_value = False
        result = self.invoke("config", "validate")
        self.assertEqual(result.exit_code, 1)


if __name__ == '__main__':
    unittest.main()


def _server_response(payload):
    response = MagicMock()
    response.ok = True
    response.status_code = 200
    response.json.return_value = payload
    return response


def _run_fetch_against_session(tmp_path, files, *args):
    """Run `fetch` with the real client over a fake requests session; return the POST body."""
    session = MagicMock()

    def request(method, url, **kwargs):
        if method == "GET":
            return _server_response({"name": "demo", "path": "/srv/demo", "files": files})
        return _server_response({"content": "body"})

    session.request.side_effect = request
    config = tmp_path / "settings.json"
    config.write_text(json.dumps({"api_key": "k", "server_url": "http://server"}), encoding="utf-8")

    with patch("contexter.api.requests.Session", return_value=session):
        result = CliRunner().invoke(cli, ["--config", str(config), "fetch", "demo", *args])
    assert result.exit_code == 0, result.output
    post = [c for c in session.request.call_args_list if c.args[0] == "POST"]
    assert len(post) == 1
    return post[0].kwargs["json"]


def test_fetch_with_exclude_sends_explicit_paths(tmp_path):
    body = _run_fetch_against_session(tmp_path, ["README.md", "secret.env", "src/a.py"], "-e", "*.env")
    assert body == {"paths": ["README.md", "src/a.py"]}


def test_fetch_without_excludes_requests_whole_project(tmp_path):
    body = _run_fetch_against_session(tmp_path, ["README.md", "src/a.py"])
    assert body == {"paths": []}

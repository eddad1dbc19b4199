import pytest

from agentic_chat.tools.file_detection import (
    DEFAULT_FILE_TYPE,
    detect_file_operation,
    file_operation_ack,
    file_type_for,
)


class TestDetectFileOperation:
    @pytest.mark.parametrize(
        "text, file_name, extension",
        [
            ("research EV makers and save as report.md", "report.md", "md"),
            ("Build a landing page in index.html.", "index.html", "html"),
            ("give me project.zip with a flask app", "project.zip", "zip"),
            ("write data_export-v2.csv", "data_export-v2.csv", "csv"),
            ("put it in Notes.TXT", "Notes.TXT", "txt"),
        ],
    )
    def test_finds_target(self, text, file_name, extension):
        target = detect_file_operation(text)
        assert target.file_name == file_name
        assert target.extension == extension

    @pytest.mark.parametrize(
        "text",
        [
            "compare the top EV makers",
            "visit tesla.com for specs",
            "Build a REST API with Node.js and Express",
            "Scaffold a Next.js app with Vue.js widgets",
            "",
        ],
    )
    def test_no_target(self, text):
        assert detect_file_operation(text) is None

    def test_first_filename_wins(self):
        assert detect_file_operation("turn notes.txt into summary.md").file_name == "notes.txt"

    def test_framework_name_is_skipped_for_a_later_filename(self):
        target = detect_file_operation("Build a Node.js server and save it as server.js")
        assert target.file_name == "server.js"
        assert target.extension == "js"

    def test_plain_js_filename_is_still_detected(self):
        assert detect_file_operation("create utils.js with a debounce helper").file_name == "utils.js"

    @pytest.mark.parametrize(
        "text, operation",
        [
            ("create app.py that prints hello", "create"),
            ("fix the bug in app.py", "edit"),
            ("convert this table to data.json", "convert"),
            ("review config.yaml for mistakes", "analyze"),
            ("make me a report.md", "create"),
        ],
    )
    def test_operation(self, text, operation):
        assert detect_file_operation(text).operation == operation

    def test_zip_target_is_archive(self):
        assert detect_file_operation("send project.zip").is_archive is True
        assert detect_file_operation("send project.py").is_archive is False


class TestLabels:
    def test_known_and_unknown_types(self):
        assert file_type_for("py") == "Python"
        assert file_type_for("MD") == "Markdown"
        assert file_type_for("xyz") == DEFAULT_FILE_TYPE

    def test_ack_names_the_file(self):
        target = detect_file_operation("fix the bug in app.py")
        assert file_operation_ack(target) == "I'll update app.py for you. Let me work through the changes."

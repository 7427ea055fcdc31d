"""Tests for marker extraction and the tree walk."""
import os

import pytest

from todo_tracker.policy import InclusionPolicy
from todo_tracker.scanner import (
    ScanError, extract_marker, iter_lines, marker_pattern, scan_file, scan_todos,
)


@pytest.fixture
def in_tmp(tmp_path, monkeypatch):
    """Run inside tmp_path so walked paths are relative like a CI checkout."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestExtractMarker:
    def test_basic_marker(self):
        assert extract_marker("x := 1 // TODO[fix]: handle nil") == ("fix", "handle nil")

    def test_description_kept_verbatim(self):
        assert extract_marker("# TODO[idea]:   spaced out  ") == ("idea", "  spaced out  ")

    def test_tag_allows_word_characters_only(self):
        assert extract_marker("TODO[perf_2]: faster") == ("perf_2", "faster")
        assert extract_marker("TODO[needs-review]: x") is None
        assert extract_marker("TODO[]: x") is None

    def test_requires_space_and_description(self):
        assert extract_marker("TODO[fix]:x") is None
        assert extract_marker("TODO[fix]: ") is None

    def test_tag_is_ascii_only(self):
        assert extract_marker("TODO[caf\u00e9]: x") is None
        assert extract_marker("TODO[\u0663]: x") is None
        assert extract_marker("# TODO[caf\u00e9]: x", marker_pattern("comment")) is None

    def test_tag_is_case_sensitive(self):
        assert extract_marker("TODO[Fix]: a") == ("Fix", "a")
        assert extract_marker("todo[fix]: a") is None

    def test_first_match_per_line(self):
        assert extract_marker("TODO[a]: one TODO[b]: two") == ("a", "one TODO[b]: two")

    def test_comment_style_requires_leader(self):
        pattern = marker_pattern("comment")
        assert extract_marker("    // TODO[fix]: a", pattern) == ("fix", "a")
        assert extract_marker("# TODO[fix]: a", pattern) == ("fix", "a")
        assert extract_marker('s = "TODO[fix]: a"', pattern) is None

    def test_unknown_style(self):
        with pytest.raises(ValueError):
            marker_pattern("fuzzy")


class TestIterLines:
    def test_line_endings_and_final_unterminated_line(self, tmp_path):
        f = tmp_path / "a.txt"
        f.write_bytes(b"one\r\ntwo\n\nlast")
        assert list(iter_lines(str(f))) == [(1, "one"), (2, "two"), (3, ""), (4, "last")]

    def test_binary_content_is_decoded_with_replacement(self, tmp_path):
        f = tmp_path / "blob.bin"
        f.write_bytes(b"\xff\xfe TODO[bin]: x\n")
        assert scan_file(str(f))[0].description == "x"


class TestScanTodos:
    def test_items_have_paths_lines_and_no_date(self, in_tmp):
        write(in_tmp / "a.go", "package a\n\n// TODO[fix]: x\n")
        result = scan_todos(".")
        assert [(t.tag, t.description, t.file, t.line, t.date) for t in result.todos] == [
            ("fix", "x", "a.go", 3, None),
        ]

    def test_absolute_root_gives_absolute_paths(self, tmp_path):
        write(tmp_path / "a.py", "# TODO[fix]: x\n")
        result = scan_todos(str(tmp_path))
        assert result.todos[0].file == os.path.join(str(tmp_path), "a.py")

    def test_walk_order_is_sorted(self, in_tmp):
        write(in_tmp / "b.py", "# TODO[t]: b\n")
        write(in_tmp / "a.py", "# TODO[t]: a\n")
        write(in_tmp / "sub" / "c.py", "# TODO[t]: c\n")
        assert [t.file for t in scan_todos(".").todos] == ["a.py", "b.py", os.path.join("sub", "c.py")]

    def test_oversized_file_never_opened(self, in_tmp, monkeypatch):
        big = write(in_tmp / "big.go", "// TODO[fix]: x\n" + "a" * (600 * 1024))
        opened = []
        real_open = open

        def spy(path, *args, **kwargs):
            opened.append(os.path.basename(str(path)))
            return real_open(path, *args, **kwargs)

        monkeypatch.setattr("builtins.open", spy)
        result = scan_todos(".")
        assert result.todos == []
        assert result.skipped == [big.name]
        assert "big.go" not in opened

    def test_prefix_denied_subtree_skipped(self, in_tmp):
        write(in_tmp / "third_party" / "lib" / "x.go", "// TODO[fix]: hidden\n")
        write(in_tmp / "third_party" / "README.md", "TODO[doc]: hidden\n")
        write(in_tmp / "main.go", "// TODO[fix]: shown\n")
        policy = InclusionPolicy.build(blacklist=["third_party"], mode="allowlist")
        files = [t.file for t in scan_todos(".", policy).todos]
        assert files == ["main.go"]

    def test_action_tmp_is_skipped_by_default(self, in_tmp):
        write(in_tmp / ".action-tmp" / "run.sh", "# TODO[fix]: internal\n")
        assert scan_todos(".").todos == []

    def test_allowlist_mode_ignores_unknown_extensions(self, in_tmp):
        write(in_tmp / "notes.txt", "TODO[fix]: text\n")
        write(in_tmp / "Makefile", "# TODO[build]: cache\n")
        write(in_tmp / ".git" / "x.md", "TODO[git]: nope\n")
        result = scan_todos(".", InclusionPolicy.build(mode="allowlist"))
        assert [t.tag for t in result.todos] == ["build"]

    def test_allowlist_mode_walks_dot_directories(self, in_tmp):
        write(in_tmp / ".github" / "workflows" / "ci.yml", "# TODO[ci]: cache deps\n")
        write(in_tmp / ".github" / ".secrets.yml", "# TODO[hidden]: no\n")
        result = scan_todos(".", InclusionPolicy.build(mode="allowlist"))
        assert [t.file for t in result.todos] == [os.path.join(".github", "workflows", "ci.yml")]

    def test_root_file_scanned_directly(self, in_tmp):
        write(in_tmp / "one.py", "# TODO[a]: b\n")
        assert [t.file for t in scan_todos("one.py").todos] == ["one.py"]

    def test_missing_root_is_fatal(self, tmp_path):
        with pytest.raises(ScanError):
            scan_todos(str(tmp_path / "nope"))

    def test_unreadable_file_aborts_by_default(self, in_tmp, monkeypatch):
        write(in_tmp / "a.py", "# TODO[a]: b\n")
        write(in_tmp / "b.py", "# TODO[b]: c\n")
        real_open = open

        def deny_b(path, *args, **kwargs):
            if os.path.basename(str(path)) == "b.py":
                raise PermissionError(13, "Permission denied", str(path))
            return real_open(path, *args, **kwargs)

        monkeypatch.setattr("builtins.open", deny_b)
        with pytest.raises(ScanError, match="b.py"):
            scan_todos(".")

        result = scan_todos(".", skip_unreadable=True)
        assert [t.file for t in result.todos] == ["a.py"]
        assert result.unreadable == ["b.py"]

"""
Tests for path authorization, directory walking and text search.
"""

import os
import tempfile
from pathlib import Path

import pytest

from vscode_bridge.filesystem import (
    ConfigError,
    DirectoryWalker,
    EntryKind,
    FileAccessDeniedError,
    FileSystemError,
    InvalidPathError,
    InvalidPatternError,
    NotADirectoryPathError,
    PathAuthorizer,
    PathNotFoundError,
    RestrictedFileReader,
    RestrictedFileWriter,
    TextScanner,
    expand_path,
)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def allowed(temp_dir):
    """Allowed root inside the temporary directory."""
    root = temp_dir / "allowed"
    root.mkdir()
    return root


@pytest.fixture
def authorizer(allowed):
    return PathAuthorizer.configure([str(allowed)])


@pytest.fixture
def reader(authorizer):
    return RestrictedFileReader(authorizer)


@pytest.fixture
def writer(authorizer):
    return RestrictedFileWriter(authorizer)


@pytest.fixture
def fake_home(monkeypatch):
    monkeypatch.setenv("HOME", "/home/u")
    return Path("/home/u")


class TestExpandPath:
    """Test path expansion."""

    def test_empty_and_none(self):
        assert expand_path(None) is None
        assert expand_path("") is None

    def test_home_shorthand(self, fake_home):
        assert expand_path("~/Code/proj") == Path("/home/u/Code/proj")
        assert expand_path("~") == Path("/home/u")

    def test_dot_segments_collapsed(self):
        assert expand_path("/a/b/../c/./d") == Path("/a/c/d")

    def test_relative_made_absolute(self, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        assert expand_path("sub/file.txt") == temp_dir / "sub" / "file.txt"

    def test_idempotent(self, fake_home):
        for raw in ["~/Code/proj", "/a/b/../c", "/tmp/x/./y", "/"]:
            once = expand_path(raw)
            assert expand_path(once) == once

    def test_does_not_require_existence(self):
        path = expand_path("/definitely/not/here/file.txt")
        assert path == Path("/definitely/not/here/file.txt")


class TestPathAuthorizer:
    """Test PathAuthorizer."""

    def test_configure_expands_and_deduplicates(self, fake_home):
        authorizer = PathAuthorizer.configure(
            ["~/Code", "/home/u/Code", "", None, "/srv/../srv/projects"]
        )
        assert authorizer.roots == (Path("/home/u/Code"), Path("/srv/projects"))

    def test_configure_uses_defaults_when_empty(self):
        authorizer = PathAuthorizer.configure([], defaults=["/a", "/b"])
        assert authorizer.roots == (Path("/a"), Path("/b"))

    def test_configure_explicit_roots_win_over_defaults(self):
        authorizer = PathAuthorizer.configure(["/x"], defaults=["/a"])
        assert authorizer.roots == (Path("/x"),)

    def test_configure_without_roots_or_defaults_fails(self):
        with pytest.raises(ConfigError):
            PathAuthorizer.configure([])

        with pytest.raises(ConfigError):
            PathAuthorizer.configure([""], defaults=[])

    def test_allowed_at_segment_boundary(self):
        authorizer = PathAuthorizer.configure(["/a/b"])
        assert authorizer.is_allowed(Path("/a/b")) is True
        assert authorizer.is_allowed(Path("/a/b/c")) is True
        assert authorizer.is_allowed(Path("/a/b/c/d.txt")) is True

    def test_sibling_prefix_is_not_allowed(self):
        authorizer = PathAuthorizer.configure(["/a/b"])
        assert authorizer.is_allowed(Path("/a/bc")) is False
        assert authorizer.is_allowed(Path("/a/b-2/file")) is False
        assert authorizer.is_allowed(Path("/a")) is False

    def test_home_example(self, fake_home):
        authorizer = PathAuthorizer.configure(["/home/u/Code"])
        expanded = authorizer.expand("~/Code/proj")
        assert expanded == Path("/home/u/Code/proj")
        assert authorizer.is_allowed(expanded) is True
        assert authorizer.is_allowed(Path("/home/u/CodeSibling")) is False

    def test_is_allowed_rejects_empty(self, authorizer):
        with pytest.raises(InvalidPathError):
            authorizer.is_allowed(None)
        with pytest.raises(InvalidPathError):
            authorizer.is_allowed("")

    def test_authorize_returns_canonical_path(self, authorizer, allowed):
        result = authorizer.authorize(f"{allowed}/sub/../file.txt")
        assert result == allowed / "file.txt"

    def test_authorize_denied_lists_roots(self, authorizer, allowed):
        with pytest.raises(FileAccessDeniedError) as exc_info:
            authorizer.authorize("/etc/passwd")

        error = exc_info.value
        assert error.path == "/etc/passwd"
        assert error.allowed_directories == [str(allowed)]
        assert "/etc/passwd" in str(error)
        assert str(allowed) in str(error)

    def test_authorize_rejects_traversal(self, authorizer, allowed):
        with pytest.raises(FileAccessDeniedError):
            authorizer.authorize(f"{allowed}/../outside.txt")

    def test_authorize_empty(self, authorizer):
        with pytest.raises(InvalidPathError):
            authorizer.authorize("")

    def test_symlink_escape_denied(self, temp_dir, allowed):
        outside = temp_dir / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_text("secret")
        (allowed / "link").symlink_to(outside)

        authorizer = PathAuthorizer.configure([str(allowed)])
        assert authorizer.is_allowed(allowed / "link" / "secret.txt") is False

        following = PathAuthorizer.configure([str(allowed)], follow_symlinks=True)
        assert following.is_allowed(allowed / "link" / "secret.txt") is True

    def test_symlink_inside_root_allowed(self, allowed):
        (allowed / "real").mkdir()
        (allowed / "alias").symlink_to(allowed / "real")

        authorizer = PathAuthorizer.configure([str(allowed)])
        assert authorizer.is_allowed(allowed / "alias" / "x.txt") is True


class TestDirectoryWalker:
    """Test DirectoryWalker."""

    def test_not_found(self, temp_dir):
        with pytest.raises(PathNotFoundError):
            DirectoryWalker().walk(temp_dir / "missing")

    def test_not_a_directory(self, temp_dir):
        file_path = temp_dir / "file.txt"
        file_path.write_text("x")
        with pytest.raises(NotADirectoryPathError):
            DirectoryWalker().walk(file_path)

    def test_non_recursive_has_no_nested_entries(self, temp_dir):
        (temp_dir / "a.txt").write_text("a")
        (temp_dir / "sub").mkdir()
        (temp_dir / "sub" / "b.txt").write_text("b")

        entries = list(DirectoryWalker().walk(temp_dir))
        assert [e.path for e in entries] == ["a.txt", "sub"]
        assert all("/" not in e.path for e in entries)

    def test_recursive_lists_every_file_once(self, temp_dir):
        (temp_dir / "a.txt").write_text("a")
        (temp_dir / "sub" / "deep").mkdir(parents=True)
        (temp_dir / "sub" / "b.txt").write_text("b")
        (temp_dir / "sub" / "deep" / "c.txt").write_text("c")

        paths = [e.path for e in DirectoryWalker().walk(temp_dir, recursive=True)]
        assert sorted(paths) == sorted(
            ["a.txt", "sub", "sub/b.txt", "sub/deep", "sub/deep/c.txt"]
        )
        assert len(paths) == len(set(paths))

    def test_children_contiguous_before_descent(self, temp_dir):
        (temp_dir / "a").mkdir()
        (temp_dir / "a" / "inner.txt").write_text("")
        (temp_dir / "b").mkdir()
        (temp_dir / "b" / "inner.txt").write_text("")
        (temp_dir / "c.txt").write_text("")

        paths = [e.path for e in DirectoryWalker().walk(temp_dir, recursive=True)]
        assert paths == ["a", "b", "c.txt", "a/inner.txt", "b/inner.txt"]

    def test_hidden_entries(self, temp_dir):
        (temp_dir / ".hidden").write_text("")
        (temp_dir / ".git").mkdir()
        (temp_dir / ".git" / "config").write_text("")
        (temp_dir / "visible.txt").write_text("")

        walker = DirectoryWalker()
        assert [e.name for e in walker.walk(temp_dir, recursive=True)] == ["visible.txt"]

        with_hidden = [e.path for e in walker.walk(temp_dir, include_hidden=True, recursive=True)]
        assert ".hidden" in with_hidden
        assert ".git/config" in with_hidden

    def test_depth_bound(self, temp_dir):
        current = temp_dir
        for i in range(5):
            current = current / f"d{i}"
            current.mkdir()
            (current / "f.txt").write_text("")

        paths = [e.path for e in DirectoryWalker(max_depth=2).walk(temp_dir, recursive=True)]
        # d0 and d0/d1 are descended into; d0/d1/d2 is listed but not entered
        assert "d0/d1/d2" in paths
        assert "d0/d1/f.txt" in paths
        assert "d0/d1/d2/f.txt" not in paths

    def test_default_depth_is_ten(self):
        assert DirectoryWalker().max_depth == 10

    def test_symlinked_directory_not_followed(self, temp_dir):
        (temp_dir / "real").mkdir()
        (temp_dir / "real" / "f.txt").write_text("")
        (temp_dir / "loop").symlink_to(temp_dir)

        entries = {e.path: e for e in DirectoryWalker().walk(temp_dir, recursive=True)}
        assert entries["loop"].kind == EntryKind.DIRECTORY
        assert not any(p.startswith("loop/") for p in entries)

    def test_symlink_outside_roots_omitted(self, temp_dir, allowed, authorizer):
        outside = temp_dir / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_text("password=hunter2")
        (allowed / "real.txt").write_text("ok")
        (allowed / "leak.txt").symlink_to(outside / "secret.txt")
        (allowed / "leakdir").symlink_to(outside)
        (allowed / "alias.txt").symlink_to(allowed / "real.txt")

        walker = DirectoryWalker(authorizer=authorizer)
        names = [e.name for e in walker.walk(allowed)]
        assert names == ["alias.txt", "real.txt"]

        # Without an authorizer the walker does not filter links.
        names = [e.name for e in DirectoryWalker().walk(allowed)]
        assert "leak.txt" in names

    def test_entry_metadata(self, temp_dir):
        file_path = temp_dir / "data.txt"
        file_path.write_text("hello")
        os.chmod(file_path, 0o640)
        (temp_dir / "folder").mkdir()

        entries = {e.name: e for e in DirectoryWalker().walk(temp_dir)}
        data = entries["data.txt"]
        assert data.kind == EntryKind.FILE
        assert data.size == 5
        assert data.permissions == "640"
        assert data.modified.tzinfo is not None
        assert entries["folder"].kind == EntryKind.DIRECTORY
        assert entries["folder"].is_dir


class TestTextScanner:
    """Test TextScanner."""

    def test_one_match_per_file(self, temp_dir):
        (temp_dir / "a.txt").write_text("foo\nbar")
        (temp_dir / "b.txt").write_text("foo")

        results = list(TextScanner().search(temp_dir, "foo", extensions=[".txt"]))
        assert [(r.file, r.line) for r in results] == [("a.txt", 1), ("b.txt", 1)]
        assert all(r.match == "foo" for r in results)

    def test_case_sensitivity(self, temp_dir):
        (temp_dir / "a.txt").write_text("FOO")

        scanner = TextScanner()
        assert len(list(scanner.search(temp_dir, "foo", case_sensitive=False))) == 1
        assert len(list(scanner.search(temp_dir, "foo", case_sensitive=True))) == 0

    def test_line_numbers_trim_and_first_match(self, temp_dir):
        (temp_dir / "code.py").write_text("x = 1\n    def alpha(): pass  \ndef beta(): pass\n")

        results = list(TextScanner().search(temp_dir, r"def \w+"))
        assert [r.line for r in results] == [2, 3]
        assert results[0].content == "def alpha(): pass"
        assert results[0].match == "def alpha"

    def test_extension_filter(self, temp_dir):
        (temp_dir / "a.py").write_text("needle")
        (temp_dir / "b.js").write_text("needle")

        results = list(TextScanner().search(temp_dir, "needle", extensions=[".py"]))
        assert [r.file for r in results] == ["a.py"]

        results = list(TextScanner().search(temp_dir, "needle"))
        assert {r.file for r in results} == {"a.py", "b.js"}

    def test_binary_files_skipped(self, temp_dir):
        (temp_dir / "blob.bin").write_bytes(b"\xff\xfe\x00needle\x80")
        (temp_dir / "text.txt").write_text("needle")

        results = list(TextScanner().search(temp_dir, "needle"))
        assert [r.file for r in results] == ["text.txt"]

    def test_hidden_always_excluded(self, temp_dir):
        (temp_dir / ".env").write_text("needle")
        (temp_dir / ".cache").mkdir()
        (temp_dir / ".cache" / "x.txt").write_text("needle")

        assert list(TextScanner().search(temp_dir, "needle")) == []

    def test_recursive_flag(self, temp_dir):
        (temp_dir / "sub").mkdir()
        (temp_dir / "sub" / "x.txt").write_text("needle")

        scanner = TextScanner()
        assert [r.file for r in scanner.search(temp_dir, "needle")] == ["sub/x.txt"]
        assert list(scanner.search(temp_dir, "needle", recursive=False)) == []

    def test_invalid_pattern(self, temp_dir):
        with pytest.raises(InvalidPatternError):
            TextScanner().search(temp_dir, "(unclosed")

    def test_missing_root(self, temp_dir):
        with pytest.raises(PathNotFoundError):
            TextScanner().search(temp_dir / "missing", "x")

    def test_symlink_outside_roots_not_read(self, temp_dir, allowed, authorizer):
        outside = temp_dir / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_text("password=hunter2")
        (allowed / "leak.txt").symlink_to(outside / "secret.txt")
        (allowed / "notes.txt").write_text("password reset")
        (allowed / "alias.txt").symlink_to(allowed / "notes.txt")

        scanner = TextScanner(authorizer=authorizer)
        results = list(scanner.search(allowed, "password"))
        assert [r.file for r in results] == ["alias.txt", "notes.txt"]

    def test_symlink_check_with_unfiltered_walker(self, temp_dir, allowed, authorizer):
        outside = temp_dir / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_text("password=hunter2")
        (allowed / "leak.txt").symlink_to(outside / "secret.txt")

        scanner = TextScanner(DirectoryWalker(), authorizer=authorizer)
        assert list(scanner.search(allowed, "password")) == []


class TestRestrictedFileReader:
    """Test RestrictedFileReader."""

    def test_read_file_success(self, allowed, reader):
        (allowed / "test.py").write_text("print('hello world')")
        assert reader.read_file(allowed / "test.py") == "print('hello world')"

    def test_read_file_denied_outside_directory(self, reader):
        with pytest.raises(FileAccessDeniedError):
            reader.read_file("/etc/passwd")

    def test_read_file_not_found(self, allowed, reader):
        with pytest.raises(PathNotFoundError):
            reader.read_file(allowed / "missing.py")

    def test_read_directory_fails(self, allowed, reader):
        (allowed / "sub").mkdir()
        with pytest.raises(FileSystemError):
            reader.read_file(allowed / "sub")

    def test_list_directory(self, allowed, reader):
        (allowed / "file1.py").write_text("content1")
        (allowed / ".hidden").write_text("")

        entries = reader.list_directory(str(allowed))
        assert [e.name for e in entries] == ["file1.py"]

    def test_list_directory_denied(self, temp_dir, reader):
        with pytest.raises(FileAccessDeniedError):
            reader.list_directory(temp_dir)

    def test_list_directory_symlink_kinds(self, temp_dir, allowed, reader):
        (allowed / "real").mkdir()
        (allowed / "alias").symlink_to(allowed / "real")
        outside = temp_dir / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_text("password=hunter2")
        (allowed / "leak.txt").symlink_to(outside / "secret.txt")

        entries = {e.name: e for e in reader.list_directory(allowed)}
        assert set(entries) == {"alias", "real"}
        assert entries["alias"].kind == EntryKind.DIRECTORY

    def test_read_symlink_outside_denied(self, temp_dir, allowed, reader):
        outside = temp_dir / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_text("password=hunter2")
        (allowed / "leak.txt").symlink_to(outside / "secret.txt")

        with pytest.raises(FileAccessDeniedError):
            reader.read_file(allowed / "leak.txt")


class TestRestrictedFileWriter:
    """Test RestrictedFileWriter."""

    def test_write_creates_parents(self, allowed, writer):
        written = writer.write_file(allowed / "a" / "b" / "c.txt", "hello")
        assert written == 5
        assert (allowed / "a" / "b" / "c.txt").read_text() == "hello"

    def test_write_without_parents_fails(self, allowed, writer):
        with pytest.raises(PathNotFoundError):
            writer.write_file(allowed / "missing" / "c.txt", "x", create_parents=False)

    def test_write_denied_outside(self, temp_dir, writer):
        with pytest.raises(FileAccessDeniedError):
            writer.write_file(temp_dir / "outside.txt", "x")
        assert not (temp_dir / "outside.txt").exists()

    def test_create_directory(self, allowed, writer):
        created = writer.create_directory(allowed / "x" / "y")
        assert created.is_dir()
        # exists already: no error
        writer.create_directory(allowed / "x" / "y")

    def test_delete_file(self, allowed, writer):
        target = allowed / "gone.txt"
        target.write_text("")
        writer.delete(target)
        assert not target.exists()

    def test_delete_missing(self, allowed, writer):
        with pytest.raises(PathNotFoundError):
            writer.delete(allowed / "missing.txt")

    def test_delete_non_empty_directory_requires_recursive(self, allowed, writer):
        (allowed / "dir").mkdir()
        (allowed / "dir" / "f.txt").write_text("")

        with pytest.raises(FileSystemError):
            writer.delete(allowed / "dir")

        writer.delete(allowed / "dir", recursive=True)
        assert not (allowed / "dir").exists()

    def test_delete_root_refused(self, allowed, writer):
        with pytest.raises(FileAccessDeniedError):
            writer.delete(allowed, recursive=True)
        assert allowed.exists()

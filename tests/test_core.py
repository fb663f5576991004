"""Unit tests for root resolution."""

import os
from pathlib import Path

import pytest

from projroot.core import RootMatch, WalkState, resolve, start_dir_for


@pytest.fixture
def nested(tmp_path):
    """Create tmp_path/a/b/src/c with a .git directory in a/b."""
    b = tmp_path / "a" / "b"
    c = b / "src" / "c"
    c.mkdir(parents=True)
    (b / ".git").mkdir()
    return tmp_path


class TestResolve:
    """Tests for resolve function."""

    def test_match_in_start_dir(self, tmp_path):
        """Test finding a root in the starting directory itself."""
        (tmp_path / ".git").mkdir()

        result = resolve(tmp_path, [".git"])
        assert result == RootMatch(tmp_path, ".git")

    def test_match_in_parent_dir(self, nested):
        """Test finding a root in an ancestor directory."""
        result = resolve(nested / "a" / "b" / "src" / "c", [".git"])
        assert result == RootMatch(nested / "a" / "b", ".git")

    def test_closest_directory_wins_over_pattern_order(self, nested):
        """Test that a nearer match beats an earlier pattern matching further up."""
        result = resolve(nested / "a" / "b" / "src" / "c", [".git", "=src"])
        assert result == RootMatch(nested / "a" / "b" / "src", "=src")

    def test_pattern_order_breaks_ties(self, nested):
        """Test that the earliest pattern wins within one directory."""
        b = nested / "a" / "b"
        assert resolve(b, ["=b", ".git"]) == RootMatch(b, "=b")
        assert resolve(b, [".git", "=b"]) == RootMatch(b, ".git")

    def test_not_found(self, tmp_path):
        """Test that None is returned when nothing matches up to the root."""
        assert resolve(tmp_path, ["no-such-marker-file-anywhere"]) is None

    def test_empty_pattern_list(self, nested):
        """Test that an empty pattern list never matches."""
        assert resolve(nested / "a" / "b", []) is None

    def test_accepts_string_path(self, nested):
        """Test that a string start directory works."""
        result = resolve(str(nested / "a" / "b" / "src"), [".git"])
        assert result.directory == nested / "a" / "b"

    def test_relative_start_dir(self, nested, monkeypatch):
        """Test that a relative start directory is made absolute."""
        monkeypatch.chdir(nested / "a")
        result = resolve("b/src", [".git"])
        assert result == RootMatch(nested / "a" / "b", ".git")

    def test_returns_pattern_as_given(self, nested):
        """Test that the matched pattern string is returned unchanged."""
        result = resolve(nested / "a" / "b" / "src" / "c", ["^a"])
        assert result.pattern == "^a"
        assert result.directory == nested / "a" / "b" / "src" / "c"

    def test_parent_pattern(self, nested):
        """Test resolving with a parent-name pattern."""
        result = resolve(nested / "a" / "b" / "src" / "c", [">a"])
        assert result == RootMatch(nested / "a" / "b", ">a")

    def test_deterministic(self, nested):
        """Test that repeated resolution gives the same result."""
        start = nested / "a" / "b" / "src" / "c"
        patterns = ["=nothing", ".git", ">b"]
        results = {resolve(start, patterns) for _ in range(5)}
        assert len(results) == 1


class TestExclusion:
    """Tests for negated patterns during a walk."""

    def test_negated_pattern_never_matches(self, nested):
        """Test that a negated pattern whose inner pattern fails is not a match."""
        assert resolve(nested / "a" / "b", ["!=nothing"]) is None

    def test_exclusion_does_not_veto_other_patterns(self, tmp_path):
        """Test !=.git inside a .git directory leaves later patterns active."""
        git_dir = tmp_path / "repo" / ".git"
        git_dir.mkdir(parents=True)
        (git_dir / "HEAD").write_text("ref: refs/heads/main\n")

        result = resolve(git_dir, ["!=.git", "HEAD"])
        assert result == RootMatch(git_dir, "HEAD")

    def test_exclusion_does_not_stop_walk(self, nested):
        """Test that the walk continues past a directory with an exclusion."""
        start = nested / "a" / "b" / "src"
        result = resolve(start, ["!=src", ".git"])
        assert result == RootMatch(nested / "a" / "b", ".git")


class TestWalkState:
    """Tests for walk bookkeeping."""

    def test_step_moves_to_parent(self, tmp_path):
        """Test that step moves one level up."""
        state = WalkState(current=tmp_path / "x", patterns=())
        assert state.step() is True
        assert state.current == tmp_path

    def test_step_stops_at_root(self):
        """Test that step refuses to move above the root."""
        root = Path(os.path.abspath(os.sep))
        state = WalkState(current=root, patterns=())
        assert state.step() is False
        assert state.current == root

    def test_levels_bounded_by_depth(self, nested):
        """Test that a failed walk visits each ancestor exactly once."""
        start = nested / "a" / "b" / "src" / "c"
        state = WalkState(current=start, patterns=("nothing-here",))
        visited = [state.current]
        while state.step():
            visited.append(state.current)
        assert len(visited) == len(set(visited))
        assert len(visited) == len(start.parts)

    def test_cache_owned_per_walk(self):
        """Test that each walk state gets its own cache."""
        first = WalkState(current=Path("/"), patterns=())
        second = WalkState(current=Path("/"), patterns=())
        assert first.cache is not second.cache


class TestStartDirFor:
    """Tests for start_dir_for."""

    def test_directory_is_kept(self, tmp_path):
        """Test that a directory maps to itself."""
        assert start_dir_for(tmp_path) == tmp_path

    def test_file_maps_to_parent(self, tmp_path):
        """Test that a file maps to its directory."""
        target = tmp_path / "main.py"
        target.write_text("")
        assert start_dir_for(target) == tmp_path

    def test_unsaved_file_maps_to_parent(self, tmp_path):
        """Test that a not yet existing file maps to its directory."""
        assert start_dir_for(tmp_path / "new.py") == tmp_path

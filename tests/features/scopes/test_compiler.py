from pathlib import Path

import pytest

from project_scopes.features.scopes.data.dir_lister import LocalDirectoryLister
from project_scopes.features.scopes.domain.interfaces import IDirectoryLister
from project_scopes.features.scopes.domain.models import ScopeRules, ScopeSnapshot
from project_scopes.features.scopes.service.compiler import VisibilityCompiler


class TreeLister(IDirectoryLister):
    """In-memory tree: directory (absolute) -> child names."""
    def __init__(self, tree):
        self.tree = tree
        self.calls = []

    def list_siblings(self, directory, exclude):
        self.calls.append(directory)
        return [directory / name for name in self.tree.get(directory, []) if directory / name != exclude]


def rules(name="s", included=(), excluded=()):
    return ScopeRules(name=name, included=frozenset(included), excluded=frozenset(excluded))


def snapshot(*active, enabled=True, global_exclude=()):
    return ScopeSnapshot(enabled=enabled, global_exclude=tuple(global_exclude), active=tuple(active))


@pytest.fixture
def compiler(project_tree):
    return VisibilityCompiler(LocalDirectoryLister(), project_tree)


# --- Ancestor-sibling enumeration ---

def test_single_include_hides_siblings_at_every_level(compiler):
    candidates = compiler.ancestor_siblings("a/b/c")

    assert candidates == {
        "a/b/c2.txt",              # siblings of c in a/b
        "a/b2", "a/a2.txt",        # siblings of b in a
        "x", "y", "z.txt", ".git", # siblings of a in root
    }
    assert not candidates & {"a", "a/b", "a/b/c", "."}


def test_top_level_include_only_hides_root_siblings(compiler):
    assert compiler.ancestor_siblings("z.txt") == {"x", "y", "a", ".git"}


def test_including_the_root_hides_nothing(compiler):
    assert compiler.ancestor_siblings(".") == set()


def test_missing_level_does_not_abort_the_climb(compiler):
    # ghost/ does not exist: its level yields nothing, the root level still counts
    assert compiler.ancestor_siblings("ghost/dir") == {"x", "y", "z.txt", "a", ".git"}


def test_include_outside_project_is_ignored(compiler):
    assert compiler.ancestor_siblings("/somewhere/else") == set()


def test_one_listing_per_ancestor_level():
    root = Path("/p")
    lister = TreeLister({root: ["a", "b"], root / "a": ["b", "c"], root / "a" / "b": ["c", "d"]})
    compiler = VisibilityCompiler(lister, root)

    compiler.ancestor_siblings("a/b/c")

    assert lister.calls == [root / "a" / "b", root / "a", root]


# --- Multi-path merge ---

def test_merge_two_disjoint_includes():
    root = Path("/p")
    lister = TreeLister({
        root: ["x", "y", "z"],
        root / "x": ["1", "1b"],
        root / "y": ["2", "2b"],
    })
    compiler = VisibilityCompiler(lister, root)

    merged = compiler.inclusion_exclusions({"x/1", "y/2"})

    assert merged == {"z", "x/1b", "y/2b"}
    assert "x" not in merged and "y" not in merged


def test_merge_on_real_tree(compiler):
    merged = compiler.inclusion_exclusions({"x/1", "y/2"})

    assert merged == {"x/1b", "x/notes.md", "y/2b", "z.txt", "a", ".git"}


def test_merge_keeps_entries_confirmed_through_an_ancestor():
    merged = VisibilityCompiler.merge_candidates({"x/1b", "y", "z"}, {"y/2b", "x", "z"})

    assert merged == {"x/1b", "y/2b", "z"}


def test_merge_is_commutative():
    set_a = {"x/1b", "y", "z", "deep/er/file"}
    set_b = {"y/2b", "x", "z", "deep"}

    assert VisibilityCompiler.merge_candidates(set_a, set_b) == VisibilityCompiler.merge_candidates(set_b, set_a)


def test_three_includes_reduce_to_their_own_siblings(compiler):
    merged = compiler.inclusion_exclusions({"x/1", "y/2", "a/b/c"})

    assert merged == {"x/1b", "x/notes.md", "y/2b", "a/b/c2.txt", "a/b2", "a/a2.txt", "z.txt", ".git"}


def test_nested_includes_show_the_whole_outer_path(compiler):
    # 'a' is included whole, so nothing under it may be hidden
    merged = compiler.inclusion_exclusions({"a", "a/b/c"})

    assert merged == {"x", "y", "z.txt", ".git"}


# --- Per-scope result ---

def test_scope_without_includes_only_applies_excludes(compiler):
    assert compiler.scope_exclusions(rules(excluded={"**/*.log", "x"})) == {"**/*.log", "x"}


def test_scope_combines_excludes_and_inclusion_derived(compiler):
    result = compiler.scope_exclusions(rules(included={"x/1"}, excluded={"**/*.log"}))

    assert result == {"**/*.log", "x/1b", "x/notes.md", "y", "z.txt", "a", ".git"}


def test_included_paths_are_never_hidden_by_their_own_scope(compiler):
    result = compiler.scope_exclusions(rules(included={"x/1", "a/b"}, excluded={"x", "x/1", "a", "y"}))

    for protected in ["x/1", "x", "a/b", "a"]:
        assert protected not in result
    assert "y" in result


# --- Full compile ---

def test_union_across_active_scopes(compiler):
    result = compiler.compile(snapshot(rules("one", excluded={"a"}), rules("two", excluded={"b"})))

    assert result == {"a": True, "b": True}


def test_other_scopes_excludes_still_apply_to_included_paths(compiler):
    result = compiler.compile(snapshot(rules("one", included={"x/1"}), rules("two", excluded={"x/1"})))

    assert result["x/1"] is True


def test_global_exclusions_are_always_merged(compiler):
    result = compiler.compile(snapshot(rules(excluded={"y"}), global_exclude=["**/.git"]))

    assert result == {"**/.git": True, "y": True}


def test_disabled_returns_global_exclusions_only(compiler):
    result = compiler.compile(snapshot(
        rules(included={"x/1"}, excluded={"y"}),
        enabled=False,
        global_exclude=["**/.git", "**/node_modules"]
    ))

    assert result == {"**/.git": True, "**/node_modules": True}


def test_compile_is_idempotent(compiler):
    state = snapshot(rules("one", included={"x/1", "a/b/c"}, excluded={"*.tmp"}), rules("two", excluded={"y"}))

    assert compiler.compile(state) == compiler.compile(state)


def test_no_project_root_means_no_result():
    compiler = VisibilityCompiler(LocalDirectoryLister(), None)

    assert compiler.compile(snapshot(rules(excluded={"a"}))) is None


# --- Path normalization ---

def test_dot_segments_in_an_include_do_not_hide_the_include(compiler):
    candidates = compiler.ancestor_siblings("a/./b")

    assert candidates == {"a/b2", "a/a2.txt", "x", "y", "z.txt", ".git"}

    result = compiler.scope_exclusions(rules(included={"a/./b"}))
    assert "a/b" not in result and "a" not in result


def test_include_climbing_out_of_the_project_hides_nothing(compiler):
    assert compiler.ancestor_siblings("../elsewhere") == set()
    assert compiler.ancestor_siblings("a/../../elsewhere") == set()


def test_include_outside_project_does_not_cancel_other_includes(compiler):
    merged = compiler.inclusion_exclusions({"x/1", "../elsewhere", "/abs/path"})

    assert merged == compiler.ancestor_siblings("x/1")
    assert not merged & {"x", "../project"}


def test_relative_root_is_resolved(project_tree, monkeypatch):
    monkeypatch.chdir(project_tree.parent)
    compiler = VisibilityCompiler(LocalDirectoryLister(), Path("project"))

    assert compiler.root == project_tree
    assert compiler.ancestor_siblings("x/1") == {"x/1b", "x/notes.md", "y", "z.txt", "a", ".git"}

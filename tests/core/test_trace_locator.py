"""Tests for trace archive selection logic."""

from __future__ import annotations

import string
from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tests.fakes import InMemoryFileSystem
from trace_opener.core.models import MatchStrategy
from trace_opener.core.trace_locator import (
    _match_key,
    build_trace_globs,
    escape_for_glob,
    find_trace_archive,
    name_to_glob_token,
    rank_trace_candidates,
    score_candidate,
    unique_paths,
)
from trace_opener.fs import LocalFileSystem, glob_matches

ROOT = Path("/ws")


class TestEscapeForGlob:
    """Tests for escape_for_glob helper function."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("plain name", "plain name"),
            ("checkout [smoke]", "checkout \\[smoke\\]"),
            ("what?", "what\\?"),
            ("a*b", "a\\*b"),
            ("{x}", "\\{x\\}"),
            ("back\\slash", "back\\\\slash"),
        ],
    )
    def test_escapes_metacharacters(self, text: str, expected: str) -> None:
        assert escape_for_glob(text) == expected

    @given(
        st.text(
            alphabet=string.ascii_letters + string.digits + "[]{}?*-_.",
            min_size=1,
            max_size=30,
        )
    )
    def test_escaped_name_matches_itself_literally(self, name: str) -> None:
        """An escaped name used as a glob matches a file with exactly that name."""
        assert glob_matches(f"**/{escape_for_glob(name)}.zip", f"traces/{name}.zip")

    @given(st.text(alphabet=string.ascii_letters, min_size=1, max_size=10))
    def test_escaped_star_does_not_act_as_wildcard(self, name: str) -> None:
        assert not glob_matches(f"**/{escape_for_glob(name + '*')}.zip", f"traces/{name}x.zip")


class TestNameToGlobToken:
    """Tests for name_to_glob_token function."""

    def test_whitespace_becomes_wildcard(self):
        assert name_to_glob_token("shows login form") == "shows*login*form"

    def test_whitespace_runs_collapse(self):
        assert name_to_glob_token("shows \t login") == "shows*login"

    def test_token_matches_any_separator(self):
        token = name_to_glob_token("shows login form")

        assert glob_matches(f"**/{token}.zip", "a/shows-login-form.zip")
        assert glob_matches(f"**/{token}.zip", "a/shows_login_form.zip")
        assert glob_matches(f"**/{token}*.zip", "a/shows_login_form_trace.zip")

    def test_token_matching_ignores_case(self):
        token = name_to_glob_token("Shows Login Form")

        assert glob_matches(f"**/{token}.zip", "a/shows-login-form.zip")


class TestBuildTraceGlobs:
    """Tests for build_trace_globs function."""

    def test_base_patterns(self):
        assert build_trace_globs("checkout") == [
            "**/checkout.zip",
            "**/checkout*.zip",
            "**/*checkout*/trace.zip",
            "**/*checkout*/*trace*.zip",
        ]

    def test_appends_extra_patterns(self):
        globs = build_trace_globs("checkout", ["artifacts/**/*.zip"])

        assert globs[-1] == "artifacts/**/*.zip"
        assert len(globs) == 5

    def test_deduplicates_extra_patterns(self):
        """An extra pattern equal to a base pattern is not searched twice."""
        globs = build_trace_globs("checkout", ["**/checkout.zip", "x/*.zip", "x/*.zip"])

        assert globs == [
            "**/checkout.zip",
            "**/checkout*.zip",
            "**/*checkout*/trace.zip",
            "**/*checkout*/*trace*.zip",
            "x/*.zip",
        ]


class TestMatchKey:
    """Tests for _match_key helper function."""

    def test_lowercases(self):
        assert _match_key("ShowsLoginForm") == "showsloginform"

    def test_removes_separators(self):
        assert _match_key("shows-login_form now") == "showsloginformnow"

    def test_keeps_other_punctuation(self):
        assert _match_key("a.b/c") == "a.b/c"


class TestScoreCandidate:
    """Tests for score_candidate function."""

    def test_both_rewards_filename_and_path(self):
        assert score_candidate(ROOT / "checkout/checkout.zip", "checkout", MatchStrategy.BOTH) == 120

    def test_both_filename_only(self):
        """The filename does not count again as part of the path."""
        assert score_candidate(ROOT / "out/checkout.zip", "checkout", MatchStrategy.BOTH) == 70

    def test_both_path_only(self):
        assert score_candidate(ROOT / "checkout/run-1.zip", "checkout", MatchStrategy.BOTH) == 50

    def test_filename_only_ignores_path(self):
        """FilenameOnly: a path-only match scores strictly lower than a filename match."""
        path_only = score_candidate(
            ROOT / "out/checkout/run.zip", "checkout", MatchStrategy.FILENAME
        )
        filename = score_candidate(
            ROOT / "out/run/checkout.zip", "checkout", MatchStrategy.FILENAME
        )

        assert path_only == 0
        assert filename == 100
        assert path_only < filename

    def test_path_contains_looks_at_directories(self):
        assert (
            score_candidate(ROOT / "out/checkout/run.zip", "checkout", MatchStrategy.PATH_CONTAINS)
            == 100
        )
        assert (
            score_candidate(ROOT / "out/run/checkout.zip", "checkout", MatchStrategy.PATH_CONTAINS)
            == 0
        )

    def test_canonical_trace_bonus(self):
        """<test dir>/trace.zip earns +30 on top of the path match."""
        assert score_candidate(ROOT / "out/checkout/trace.zip", "checkout", MatchStrategy.BOTH) == 80

    def test_canonical_trace_bonus_applies_for_any_strategy(self):
        assert (
            score_candidate(ROOT / "out/checkout/trace.zip", "checkout", MatchStrategy.FILENAME)
            == 30
        )

    def test_no_canonical_bonus_without_name_in_path(self):
        assert score_candidate(ROOT / "out/other/trace.zip", "checkout", MatchStrategy.BOTH) == 0

    @pytest.mark.parametrize(
        "relative",
        [
            "bin/Debug/net8.0/traces/run.zip",
            "TestResults/run.zip",
            "testresults/run.zip",
            "playwright/run.zip",
        ],
    )
    def test_location_bonus(self, relative: str) -> None:
        assert score_candidate(ROOT / relative, "checkout", MatchStrategy.BOTH) == 10

    def test_location_bonus_needs_whole_segment(self):
        assert score_candidate(ROOT / "playwright-traces/run.zip", "checkout", MatchStrategy.BOTH) == 0
        assert score_candidate(ROOT / "binaries/run.zip", "checkout", MatchStrategy.BOTH) == 0

    def test_fuzzy_separator_match(self):
        """Test names match hyphenated, underscored and concatenated filenames."""
        for filename in ["shows-login-form.zip", "shows_login_form.zip", "ShowsLoginForm-retry1.zip"]:
            score = score_candidate(ROOT / "out" / filename, "Shows Login Form", MatchStrategy.BOTH)
            assert score == 70, filename


class TestUniquePaths:
    """Tests for unique_paths helper function."""

    def test_removes_case_insensitive_duplicates(self):
        paths = [Path("/ws/A/Trace.zip"), Path("/ws/a/trace.zip"), Path("/ws/b.zip")]

        assert unique_paths(paths) == [Path("/ws/A/Trace.zip"), Path("/ws/b.zip")]

    def test_keeps_first_seen_order(self):
        paths = [Path("/ws/c.zip"), Path("/ws/a.zip"), Path("/ws/c.zip"), Path("/ws/b.zip")]

        assert unique_paths(paths) == [Path("/ws/c.zip"), Path("/ws/a.zip"), Path("/ws/b.zip")]


class TestRankTraceCandidates:
    """Tests for rank_trace_candidates against an in-memory tree."""

    def test_login_form_example(self):
        """The canonical <test dir>/trace.zip ranks first, then name-matching archives."""
        fs = InMemoryFileSystem(
            ROOT,
            {
                "shows-login-form.zip": 300.0,
                "ShowsLoginForm-retry1.zip": 200.0,
                "unrelated/trace.zip": 400.0,
                "shows-login-form/trace.zip": 100.0,
            },
        )

        ranked = rank_trace_candidates(
            fs, ROOT, "Shows Login Form", MatchStrategy.BOTH, ["**/trace.zip"]
        )

        assert [(c.path, c.score) for c in ranked] == [
            (ROOT / "shows-login-form/trace.zip", 80),
            (ROOT / "shows-login-form.zip", 70),
            (ROOT / "ShowsLoginForm-retry1.zip", 70),
            (ROOT / "unrelated/trace.zip", 0),
        ]

    def test_recency_breaks_score_ties(self):
        fs = InMemoryFileSystem(
            ROOT,
            {
                "TestResults/run1/checkout.zip": 100.0,
                "TestResults/run2/checkout.zip": 500.0,
                "TestResults/run3/checkout.zip": 300.0,
            },
        )

        ranked = rank_trace_candidates(fs, ROOT, "checkout", MatchStrategy.BOTH)

        assert [c.path.parent.name for c in ranked] == ["run2", "run3", "run1"]

    def test_unreadable_mtime_is_kept_but_ranked_last_among_equals(self):
        fs = InMemoryFileSystem(
            ROOT,
            {
                "TestResults/a/checkout.zip": None,
                "TestResults/b/checkout.zip": 50.0,
            },
        )

        ranked = rank_trace_candidates(fs, ROOT, "checkout", MatchStrategy.BOTH)

        assert [c.path for c in ranked] == [
            ROOT / "TestResults/b/checkout.zip",
            ROOT / "TestResults/a/checkout.zip",
        ]
        assert ranked[1].mtime == 0.0
        assert ranked[0].score == ranked[1].score

    def test_higher_score_beats_newer_file(self):
        fs = InMemoryFileSystem(
            ROOT,
            {
                "TestResults/checkout.zip": 1.0,
                "docs/checkout.zip": 9_999.0,
            },
        )

        ranked = rank_trace_candidates(fs, ROOT, "checkout", MatchStrategy.BOTH)

        assert ranked[0].path == ROOT / "TestResults/checkout.zip"

    def test_case_insensitive_duplicates_yield_one_candidate(self):
        fs = InMemoryFileSystem(
            ROOT,
            {
                "TestResults/Checkout.zip": 1.0,
                "testresults/checkout.zip": 2.0,
            },
        )

        ranked = rank_trace_candidates(fs, ROOT, "checkout", MatchStrategy.BOTH)

        assert [c.path for c in ranked] == [ROOT / "TestResults/Checkout.zip"]

    def test_file_matched_by_several_patterns_is_ranked_once(self):
        """checkout.zip matches both **/checkout.zip and **/checkout*.zip."""
        fs = InMemoryFileSystem(ROOT, {"TestResults/checkout.zip": 1.0})

        ranked = rank_trace_candidates(fs, ROOT, "checkout", MatchStrategy.BOTH)

        assert len(ranked) == 1

    def test_budget_is_split_across_patterns(self):
        fs = InMemoryFileSystem(ROOT, {})

        rank_trace_candidates(fs, ROOT, "checkout", MatchStrategy.BOTH, ["x/*.zip"], 11)

        limits = [call[3] for call in fs.enumerate_calls]
        assert limits == [3, 3, 3, 3, 3]  # ceil(11 / 5)

    def test_enumeration_excludes_node_modules(self):
        fs = InMemoryFileSystem(
            ROOT,
            {
                "node_modules/pkg/checkout.zip": 9.0,
                "TestResults/checkout.zip": 1.0,
            },
        )

        ranked = rank_trace_candidates(fs, ROOT, "checkout", MatchStrategy.BOTH)

        assert [c.path for c in ranked] == [ROOT / "TestResults/checkout.zip"]

    def test_extra_pattern_finds_differently_named_archive(self):
        fs = InMemoryFileSystem(ROOT, {"artifacts/run-42/recording.zip": 1.0})

        ranked = rank_trace_candidates(
            fs, ROOT, "checkout", MatchStrategy.BOTH, ["artifacts/**/*.zip"]
        )

        assert [c.path for c in ranked] == [ROOT / "artifacts/run-42/recording.zip"]

    def test_extra_pattern_with_brace_alternation(self):
        fs = InMemoryFileSystem(ROOT, {"a/traces/run.zip": 1.0, "a/traces/run.txt": 2.0})

        result = find_trace_archive(
            fs, ROOT, "checkout", MatchStrategy.BOTH, ["**/traces/*.{zip,trace}"]
        )

        assert result == ROOT / "a/traces/run.zip"

    def test_extra_pattern_is_anchored_at_root(self):
        """A bare *.zip only picks up archives directly under the root."""
        fs = InMemoryFileSystem(ROOT, {"top.zip": 1.0, "deep/nested/other.zip": 2.0})

        ranked = rank_trace_candidates(fs, ROOT, "checkout", MatchStrategy.BOTH, ["*.zip"])

        assert [c.path for c in ranked] == [ROOT / "top.zip"]

    def test_extra_directory_pattern_does_not_match_its_contents(self):
        fs = InMemoryFileSystem(ROOT, {"artifacts/run.zip": 1.0})

        ranked = rank_trace_candidates(fs, ROOT, "checkout", MatchStrategy.BOTH, ["artifacts"])

        assert ranked == []


class TestFindTraceArchive:
    """Tests for find_trace_archive function."""

    def test_returns_none_when_nothing_matches(self):
        fs = InMemoryFileSystem(ROOT, {"TestResults/other.zip": 1.0})

        assert find_trace_archive(fs, ROOT, "checkout", MatchStrategy.BOTH) is None

    def test_returns_best_candidate(self):
        fs = InMemoryFileSystem(
            ROOT,
            {
                "docs/checkout-sample.zip": 5.0,
                "test-results/checkout/trace.zip": 1.0,
                "TestResults/checkout/trace.zip": 1.0,
            },
        )

        result = find_trace_archive(fs, ROOT, "checkout", MatchStrategy.PATH_CONTAINS)

        assert result == ROOT / "TestResults/checkout/trace.zip"

    def test_is_idempotent(self):
        fs = InMemoryFileSystem(
            ROOT,
            {
                "a/checkout.zip": 1.0,
                "b/checkout.zip": 1.0,
                "checkout/trace.zip": 1.0,
            },
        )

        first = find_trace_archive(fs, ROOT, "checkout", MatchStrategy.BOTH)
        second = find_trace_archive(fs, ROOT, "checkout", MatchStrategy.BOTH)

        assert first == second

    def test_on_disk_tree(self, make_tree):
        root = make_tree(
            {
                "App.Tests/bin/Debug/net8.0/playwright-traces/Adds-Item-To-Cart.zip": 2_000,
                "App.Tests/bin/Debug/net8.0/playwright-traces/Adds-Item-To-Cart-old.zip": 1_000,
                "docs/samples/adds item to cart.zip": 3_000,
            }
        )

        result = find_trace_archive(LocalFileSystem(), root, "Adds item to cart", MatchStrategy.BOTH)

        assert result == root / "App.Tests/bin/Debug/net8.0/playwright-traces/Adds-Item-To-Cart.zip"

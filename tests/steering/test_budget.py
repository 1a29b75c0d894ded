"""Tests for steer.steering.budget — fixed-budget allocation."""

from __future__ import annotations

import pathlib

import pytest

from steer.steering import budget, discovery
from steer.steering.compose import format_header
from steer.steering.models import (
    CandidateFile,
    OmissionReason,
    RunManifest,
    SteeringScope,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _wrapped_len(scope: SteeringScope, name: str, content_bytes: int, *, truncated: bool) -> int:
    header = format_header(scope, name, truncated=truncated)
    return len(header.encode("utf-8")) + 1 + content_bytes


def _candidates(agent_home: pathlib.Path, repo: pathlib.Path) -> tuple[CandidateFile, ...]:
    return discovery.discover(agent_home, repo).files


def _track_reads(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, int]]:
    """Record ``(filename, bytes returned)`` for every read the allocator makes."""
    reads: list[tuple[str, int]] = []
    original = budget._read_prefix

    def _tracking(path: pathlib.Path, limit: int) -> tuple[bytes, int]:
        raw, size = original(path, limit)
        reads.append((path.name, len(raw)))
        return raw, size

    monkeypatch.setattr(budget, "_read_prefix", _tracking)
    return reads


def _assert_exhaustive(manifest: RunManifest, candidates) -> None:
    for c in candidates:
        hits = 0
        hits += sum(1 for e in manifest.entries if (e.scope, e.filename) == (c.scope, c.filename))
        hits += sum(1 for o in manifest.omissions if (o.scope, o.filename) == (c.scope, c.filename))
        hits += manifest.skipped.count(c)
        assert hits == 1, c


# ---------------------------------------------------------------------------
# Admission
# ---------------------------------------------------------------------------


class TestAdmission:
    def test_admits_everything_within_budget(
        self, agent_home, repo, global_dir, project_dir, write_file
    ) -> None:
        write_file(global_dir, "a.md", "global a")
        write_file(project_dir, "b.md", "project b")
        manifest = budget.allocate(_candidates(agent_home, repo), 4096)

        assert [e.filename for e in manifest.entries] == ["a.md", "b.md"]
        assert not any(e.truncated for e in manifest.entries)
        assert manifest.omissions == []
        assert manifest.bytes_used == (
            _wrapped_len(SteeringScope.GLOBAL, "a.md", 8, truncated=False)
            + _wrapped_len(SteeringScope.PROJECT, "b.md", 9, truncated=False)
        )

    def test_header_counts_against_budget(
        self, agent_home, repo, project_dir, write_file
    ) -> None:
        write_file(project_dir, "a.md", "x" * 40)
        exact = _wrapped_len(SteeringScope.PROJECT, "a.md", 40, truncated=False)

        fits = budget.allocate(_candidates(agent_home, repo), exact)
        assert fits.entries[0].truncated is False
        assert fits.bytes_used == exact

        short = budget.allocate(_candidates(agent_home, repo), exact - 1)
        assert short.entries[0].truncated is True
        assert short.bytes_used <= exact - 1

    def test_entry_keeps_original_length(
        self, agent_home, repo, project_dir, write_file
    ) -> None:
        write_file(project_dir, "a.md", "é" * 50)
        manifest = budget.allocate(_candidates(agent_home, repo), 4096)
        entry = manifest.entries[0]
        assert entry.original_bytes == 100
        assert entry.content == "é" * 50


# ---------------------------------------------------------------------------
# Truncation and exhaustion
# ---------------------------------------------------------------------------


class TestTruncation:
    def test_second_scope_file_truncated_to_fit(
        self, agent_home, repo, global_dir, project_dir, write_file
    ) -> None:
        write_file(global_dir, "a.md", "A" * 40)
        write_file(project_dir, "b.md", "B" * 90)

        manifest = budget.allocate(_candidates(agent_home, repo), 100)

        a, b = manifest.entries
        assert a.header == "[global/a.md]"
        assert a.truncated is False
        assert a.content == "A" * 40
        assert b.header == "[project/b.md truncated]"
        assert b.truncated is True
        assert b.content == "B" * 21
        assert b.original_bytes == 90
        assert manifest.omissions == []
        assert len(manifest.truncated) == 1
        assert manifest.bytes_used == 100

    def test_ordering_beats_best_fit(
        self, agent_home, repo, global_dir, write_file
    ) -> None:
        write_file(global_dir, "a.md", "A" * 40)
        write_file(global_dir, "z.md", "Z" * 5)
        limit = _wrapped_len(SteeringScope.GLOBAL, "a.md", 10, truncated=True)

        manifest = budget.allocate(_candidates(agent_home, repo), limit)

        (a,) = manifest.entries
        assert a.filename == "a.md"
        assert a.truncated is True
        assert a.content == "A" * 10
        assert [(o.filename, o.reason) for o in manifest.omissions] == [
            ("z.md", OmissionReason.BUDGET_EXHAUSTED)
        ]

    def test_header_that_cannot_fit_closes_budget(
        self, agent_home, repo, global_dir, project_dir, write_file
    ) -> None:
        write_file(global_dir, "a.md", "A" * 40)
        write_file(project_dir, "z.md", "Z")
        manifest = budget.allocate(_candidates(agent_home, repo), 10)

        assert manifest.entries == []
        assert [(o.filename, o.reason) for o in manifest.omissions] == [
            ("a.md", OmissionReason.BUDGET_EXHAUSTED),
            ("z.md", OmissionReason.BUDGET_EXHAUSTED),
        ]
        assert manifest.bytes_used == 0

    def test_truncation_never_splits_characters(
        self, agent_home, repo, project_dir, write_file
    ) -> None:
        write_file(project_dir, "a.md", "€" * 30)
        header_room = _wrapped_len(SteeringScope.PROJECT, "a.md", 0, truncated=True)
        for extra in range(1, 12):
            manifest = budget.allocate(_candidates(agent_home, repo), header_room + extra)
            if not manifest.entries:
                # Fewer than three bytes of room: nothing useful fits
                assert extra < 3
                continue
            entry = manifest.entries[0]
            assert entry.content == "€" * (extra // 3)
            assert entry.content_bytes <= extra
            assert entry.content.encode("utf-8").decode("utf-8") == entry.content

    def test_exhausted_files_are_not_read(
        self, agent_home, repo, project_dir, write_file, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        write_file(project_dir, "a.md", "A" * 200)
        write_file(project_dir, "b.md", "B")
        write_file(project_dir, "c.md", "C")
        candidates = _candidates(agent_home, repo)

        reads = _track_reads(monkeypatch)
        limit = _wrapped_len(SteeringScope.PROJECT, "a.md", 50, truncated=True)
        manifest = budget.allocate(candidates, limit)

        assert [name for name, _ in reads] == ["a.md"]
        assert [o.filename for o in manifest.omissions] == ["b.md", "c.md"]

    def test_reads_are_bounded_by_remaining_budget(
        self, agent_home, repo, project_dir, write_file, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        write_file(project_dir, "huge.md", b"x" * 5_000_000)
        reads = _track_reads(monkeypatch)

        manifest = budget.allocate(_candidates(agent_home, repo), 200)

        assert reads == [("huge.md", 201)]
        (entry,) = manifest.entries
        assert entry.truncated is True
        assert entry.original_bytes == 5_000_000
        assert manifest.bytes_used == 200

    def test_whitespace_prefix_of_large_file_is_not_skipped(
        self, agent_home, repo, project_dir, write_file
    ) -> None:
        write_file(project_dir, "a.md", " " * 500 + "late content")
        manifest = budget.allocate(_candidates(agent_home, repo), 100)

        assert manifest.skipped == []
        assert [(o.filename, o.reason) for o in manifest.omissions] == [
            ("a.md", OmissionReason.BUDGET_EXHAUSTED)
        ]

    @pytest.mark.parametrize("limit", [0, -1, -100])
    def test_zero_or_negative_budget(
        self, agent_home, repo, project_dir, write_file, limit: int
    ) -> None:
        write_file(project_dir, "a.md", "A")
        manifest = budget.allocate(_candidates(agent_home, repo), limit)
        assert manifest.budget == 0
        assert manifest.entries == []
        assert [o.reason for o in manifest.omissions] == [OmissionReason.BUDGET_EXHAUSTED]


# ---------------------------------------------------------------------------
# Per-file failures
# ---------------------------------------------------------------------------


class TestFailures:
    def test_whitespace_only_is_silently_skipped(
        self, agent_home, repo, project_dir, write_file
    ) -> None:
        write_file(project_dir, "01.md", "  \n\t\n")
        write_file(project_dir, "02.md", "")
        write_file(project_dir, "03.md", "real")
        manifest = budget.allocate(_candidates(agent_home, repo), 4096)

        assert [e.filename for e in manifest.entries] == ["03.md"]
        assert manifest.omissions == []
        assert [c.filename for c in manifest.skipped] == ["01.md", "02.md"]

    def test_non_utf8_is_omitted_without_consuming_budget(
        self, agent_home, repo, project_dir, write_file
    ) -> None:
        write_file(project_dir, "01.md", b"\xff\xfe\xfd")
        write_file(project_dir, "02.md", "ok")
        limit = _wrapped_len(SteeringScope.PROJECT, "02.md", 2, truncated=False)
        manifest = budget.allocate(_candidates(agent_home, repo), limit)

        assert [(o.filename, o.reason) for o in manifest.omissions] == [
            ("01.md", OmissionReason.NON_UTF8)
        ]
        assert [e.filename for e in manifest.entries] == ["02.md"]
        assert manifest.entries[0].truncated is False

    def test_invalid_bytes_inside_read_window_rejected(
        self, agent_home, repo, project_dir, write_file
    ) -> None:
        write_file(project_dir, "01.md", b"A" * 5 + b"\xff" + b"A" * 100)
        limit = _wrapped_len(SteeringScope.PROJECT, "01.md", 10, truncated=True)
        manifest = budget.allocate(_candidates(agent_home, repo), limit)
        assert manifest.entries == []
        assert manifest.omissions[0].reason is OmissionReason.NON_UTF8

    def test_invalid_bytes_past_read_window_are_never_seen(
        self, agent_home, repo, project_dir, write_file
    ) -> None:
        write_file(project_dir, "01.md", b"A" * 100 + b"\xff")
        limit = _wrapped_len(SteeringScope.PROJECT, "01.md", 10, truncated=True)
        manifest = budget.allocate(_candidates(agent_home, repo), limit)
        assert manifest.omissions == []
        (entry,) = manifest.entries
        assert entry.content == "A" * 10
        assert entry.truncated is True

    def test_split_character_at_read_boundary_is_accepted(
        self, agent_home, repo, project_dir, write_file
    ) -> None:
        # Room for 4 content bytes; the bounded read ends partway through
        # a three-byte character.
        write_file(project_dir, "01.md", "€" * 40)
        limit = _wrapped_len(SteeringScope.PROJECT, "01.md", 4, truncated=True)
        manifest = budget.allocate(_candidates(agent_home, repo), limit)
        assert manifest.omissions == []
        assert manifest.entries[0].content == "€"

    def test_read_error_is_recorded_and_run_continues(
        self, agent_home, repo, project_dir, write_file
    ) -> None:
        gone = write_file(project_dir, "01.md", "vanishes")
        write_file(project_dir, "02.md", "stays")
        candidates = _candidates(agent_home, repo)
        gone.unlink()

        manifest = budget.allocate(candidates, 4096)

        (record,) = manifest.omissions
        assert record.filename == "01.md"
        assert record.reason is OmissionReason.READ_ERROR
        assert record.detail
        assert [e.filename for e in manifest.entries] == ["02.md"]


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


class TestProperties:
    @pytest.fixture
    def mixed(self, agent_home, repo, global_dir, project_dir, write_file):
        write_file(global_dir, "a.md", "alpha " * 20)
        write_file(global_dir, "b.md", "   ")
        write_file(global_dir, "c.md", b"\xc3\x28")
        write_file(project_dir, "a.md", "ünïcödé " * 15)
        write_file(project_dir, "d.md", "delta")
        return _candidates(agent_home, repo)

    def test_budget_never_exceeded(self, mixed) -> None:
        for limit in range(0, 600, 7):
            manifest = budget.allocate(mixed, limit)
            total = sum(e.wrapped_bytes for e in manifest.entries)
            assert total <= limit
            assert total == manifest.bytes_used

    def test_every_candidate_accounted_once(self, mixed) -> None:
        for limit in (0, 50, 150, 250, 10_000):
            manifest = budget.allocate(mixed, limit)
            _assert_exhaustive(manifest, mixed)

    def test_entries_follow_discovery_order(self, mixed) -> None:
        manifest = budget.allocate(mixed, 10_000)
        order = [(c.scope, c.filename) for c in mixed]
        positions = [order.index((e.scope, e.filename)) for e in manifest.entries]
        assert positions == sorted(positions)
        assert [e.scope for e in manifest.entries] == [
            SteeringScope.GLOBAL,
            SteeringScope.PROJECT,
            SteeringScope.PROJECT,
        ]

    def test_deterministic(self, mixed) -> None:
        assert budget.allocate(mixed, 200) == budget.allocate(mixed, 200)

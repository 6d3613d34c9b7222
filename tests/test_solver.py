"""Tests für den Backtracking-Stundenplanbauer und den ConflictReport."""

import random
import time
from itertools import combinations

import pytest

from config.schema import PlannerConfig, SearchConfig
from models.course import Course, block_out_course
from models.meeting_time import MeetingTime
from models.section import ClassStatus, Section
from solver.report import ConflictReport
from solver.scheduler import (
    BuildResult,
    NoSchedulesPossibleError,
    ScheduleBuilder,
    SearchBudget,
)


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

class NoShuffle(random.Random):
    """Zufallsquelle, die die Reihenfolge unverändert lässt (deterministische Tests)."""

    def shuffle(self, x, *args, **kwargs):
        return None


def make_section(section_id: int, days: list[int], start: str, end: str,
                 status: ClassStatus = ClassStatus.OPEN) -> Section:
    return Section(
        section_id=section_id,
        section_number=f"{section_id:03d}",
        status=status,
        meeting_times=[MeetingTime(days=days, start_time=start, end_time=end)],
    )


def make_course(name: str, sections: list[Section]) -> Course:
    return Course(department="TST", course_number=name, title=f"Kurs {name}", sections=sections)


def assert_conflict_free(sections: list[Section], block_outs: list[Section] = ()) -> None:
    for a, b in combinations(sections, 2):
        assert not a.conflicts_with(b), f"{a.description} kollidiert mit {b.description}"
    for s in sections:
        for block in block_outs:
            assert not s.conflicts_with(block)


@pytest.fixture
def two_courses() -> list[Course]:
    """A: {A1 Mo 9-10}, B: {B1 Mo 9:30-10:30, B2 Di 9-10}."""
    a1 = make_section(1, [0], "09:00", "10:00")
    b1 = make_section(2, [0], "09:30", "10:30")
    b2 = make_section(3, [1], "09:00", "10:00")
    return [make_course("A", [a1]), make_course("B", [b1, b2])]


@pytest.fixture
def many_options() -> list[Course]:
    """Vier Kurse mit je vier konfliktfreien Sektionen (viele gültige Pläne)."""
    courses = []
    sid = 100
    for c_idx in range(4):
        sections = []
        for day in range(4):
            sid += 1
            start = f"{8 + 2 * c_idx:02d}:00"
            end = f"{9 + 2 * c_idx:02d}:00"
            sections.append(make_section(sid, [day], start, end))
        courses.append(make_course(f"M{c_idx}", sections))
    return courses


# ─── CONFLICT REPORT ──────────────────────────────────────────────────────────

class TestConflictReport:
    def test_empty(self):
        report = ConflictReport()
        assert not report
        assert report.describe() == ""
        assert len(report) == 0

    def test_initial_message(self):
        report = ConflictReport("Keine Sektion")
        assert report.lines == ["Keine Sektion"]

    def test_merge_appends_with_newline(self):
        """merge trennt nur dann mit Zeilenumbruch, wenn schon Inhalt da ist."""
        first = ConflictReport()
        first.merge(ConflictReport("a"))
        assert first.describe() == "a"
        first.merge(ConflictReport("b"))
        assert first.describe() == "a\nb"

    def test_merge_empty_other_is_noop(self):
        report = ConflictReport("a")
        report.merge(ConflictReport())
        assert report.describe() == "a"

    def test_add_conflict_names_both_sections(self):
        a = make_section(1, [0], "09:00", "10:00")
        b = make_section(2, [0], "09:30", "10:30")
        make_course("A", [a])
        make_course("B", [b])
        report = ConflictReport()
        report.add_conflict(a, b)
        text = report.describe()
        assert text.startswith("Konflikt zwischen ")
        assert "TST A" in text and "TST B" in text


# ─── BUILD (mit Konfliktprüfung) ──────────────────────────────────────────────

class TestBuild:
    def test_unique_feasible_assignment(self, two_courses):
        """A1 + B2 ist die einzige gültige Kombination – bei jedem Seed."""
        a1 = two_courses[0].sections[0]
        b2 = two_courses[1].sections[1]
        for seed in range(20):
            result = ScheduleBuilder(rng=random.Random(seed)).build(two_courses, [])
            assert result.ok
            assert result.sections == [a1, b2]
            assert result.conflicts_checked

    def test_result_order_follows_course_order(self, many_options):
        result = ScheduleBuilder(rng=random.Random(1)).build(many_options)
        assert result.ok
        for section, course in zip(result.sections, many_options):
            assert section.source_course is course

    def test_closed_section_filtered(self):
        """Nur geschlossene Sektion: ohne Erlaubnis unlösbar, mit Erlaubnis gewählt."""
        a1 = make_section(1, [0], "09:00", "10:00", status=ClassStatus.CLOSED)
        courses = [make_course("A", [a1])]

        result = ScheduleBuilder().build(courses, [], allow_non_open=False)
        assert not result.ok
        assert result.sections is None
        assert "TST A" in result.report.describe()

        result = ScheduleBuilder().build(courses, [], allow_non_open=True)
        assert result.ok
        assert result.sections == [a1]

    def test_waitlisted_counts_as_non_open(self):
        a1 = make_section(1, [0], "09:00", "10:00", status=ClassStatus.WAITLISTED)
        result = ScheduleBuilder().build([make_course("A", [a1])], [])
        assert not result.ok

    def test_empty_course_list(self):
        """Keine Kurse → leerer Plan, leerer Report."""
        result = ScheduleBuilder().build([], [])
        assert result.ok
        assert result.sections == []
        assert not result.report

    def test_course_without_sections_reported(self):
        a = make_course("A", [make_section(1, [0], "09:00", "10:00")])
        empty = make_course("LEER", [])
        result = ScheduleBuilder().build([a, empty], [])
        assert not result.ok
        assert "Keine wählbare Sektion für Kurs: TST LEER" in result.report.describe()

    def test_every_unreachable_course_reported(self):
        """Auch Kurse hinter einem früheren Konflikt werden als unwählbar genannt."""
        a1 = make_section(1, [0], "09:00", "10:00")
        b1 = make_section(2, [1], "09:00", "10:00", status=ClassStatus.CLOSED)
        block = block_out_course(
            "Arbeit", [MeetingTime(days=[0], start_time="08:00", end_time="12:00")],
        )
        result = ScheduleBuilder().build(
            [make_course("A", [a1]), make_course("B", [b1]), make_course("LEER", [])],
            block.sections,
            allow_non_open=False,
        )
        assert not result.ok
        assert not result.aborted
        assert result.report.lines == [
            "Keine wählbare Sektion für Kurs: TST B – Kurs B",
            "Keine wählbare Sektion für Kurs: TST LEER – Kurs LEER",
        ]

    def test_infeasible_pair_explained(self):
        a1 = make_section(1, [0], "09:00", "10:00")
        b1 = make_section(2, [0], "09:15", "10:15")
        result = ScheduleBuilder().build([make_course("A", [a1]), make_course("B", [b1])])
        assert not result.ok
        text = result.report.describe()
        assert "Konflikt zwischen" in text
        assert "TST A" in text and "TST B" in text

    def test_block_out_respected(self):
        """Sperrzeit schließt die passende Sektion aus."""
        a1 = make_section(1, [0], "09:00", "10:00")
        a2 = make_section(2, [1], "09:00", "10:00")
        block = block_out_course(
            "Arbeit", [MeetingTime(days=[0], start_time="08:00", end_time="12:00")],
        )
        block_outs = block.sections
        for seed in range(10):
            result = ScheduleBuilder(rng=random.Random(seed)).build(
                [make_course("A", [a1, a2])], block_outs,
            )
            assert result.sections == [a2]

    def test_block_out_only_option_infeasible(self):
        a1 = make_section(1, [0], "09:00", "10:00")
        block = block_out_course(
            "Arbeit", [MeetingTime(days=[0], start_time="09:30", end_time="12:00")],
        )
        result = ScheduleBuilder().build([make_course("A", [a1])], block.sections)
        assert not result.ok
        assert "Arbeit" in result.report.describe()

    def test_every_collision_recorded(self):
        """Kollision mit Sperrzeit UND gewählter Sektion ergibt zwei Meldungen."""
        a1 = make_section(1, [0], "09:00", "10:00")
        b1 = make_section(2, [0], "09:30", "10:30")
        block = block_out_course(
            "Sport", [MeetingTime(days=[0], start_time="10:00", end_time="11:00")],
        )
        result = ScheduleBuilder(rng=NoShuffle()).build(
            [make_course("A", [a1]), make_course("B", [b1])], block.sections,
        )
        assert not result.ok
        lines = result.report.lines
        assert len(lines) == 2
        assert any("Sport" in line for line in lines)
        assert any("TST A" in line for line in lines)

    def test_backtrack_leaves_no_stale_entries(self):
        """Kurs 2 kollidiert mit der ersten Wahl in Kurs 1 → Rücksprung in Kurs 1.

        Die Auswahl beim Eintritt in Kurs 2 darf nie Reste aus dem verworfenen
        Zweig enthalten, und das Ergebnis hat genau drei Einträge.
        """
        x1 = make_section(1, [0], "09:00", "10:00")
        x2 = make_section(2, [1], "09:00", "10:00")
        y1 = make_section(3, [0], "09:00", "10:00")
        y_closed = make_section(4, [2], "09:00", "10:00", status=ClassStatus.CLOSED)
        z1 = make_section(5, [3], "09:00", "10:00")
        courses = [
            make_course("X", [x1, x2]),
            make_course("Y", [y1, y_closed]),
            make_course("Z", [z1]),
        ]

        seen: list[tuple[int, list[Section]]] = []

        class RecordingBuilder(ScheduleBuilder):
            def _search(self, index, courses, selected, block_outs, allow_non_open):
                seen.append((index, list(selected)))
                return super()._search(index, courses, selected, block_outs, allow_non_open)

        result = RecordingBuilder(rng=NoShuffle()).build(courses, [])
        assert result.ok
        assert result.sections == [x2, y1, z1]
        assert len(result.sections) == 3

        entries_course_2 = [sel for idx, sel in seen if idx == 1]
        assert entries_course_2 == [[x1], [x2]]
        entries_course_3 = [sel for idx, sel in seen if idx == 2]
        assert entries_course_3 == [[x2, y1]]

    def test_selection_list_restored_after_search(self):
        """Nach einem gescheiterten Zweig ist die Auswahl wieder exakt wie vorher."""
        x1 = make_section(1, [0], "09:00", "10:00")
        y1 = make_section(2, [0], "09:00", "10:00")
        courses = [make_course("X", [x1]), make_course("Y", [y1])]
        pre = make_section(9, [4], "09:00", "10:00")
        selected = [pre]
        builder = ScheduleBuilder(rng=NoShuffle())
        builder.budget.start()
        outcome = builder._search(0, courses, selected, [], False)
        assert outcome.sections is None
        assert selected == [pre]

    def test_repeated_builds_always_valid(self, many_options):
        """Wiederholte Aufrufe liefern immer gültige, aber nicht zwingend gleiche Pläne."""
        results = set()
        for seed in range(30):
            result = ScheduleBuilder(rng=random.Random(seed)).build(many_options)
            assert result.ok
            assert len(result.sections) == len(many_options)
            assert_conflict_free(result.sections)
            results.add(tuple(s.section_id for s in result.sections))
        assert len(results) > 1

    def test_default_rng_is_fresh(self, many_options):
        result = ScheduleBuilder().build(many_options)
        assert result.ok
        assert_conflict_free(result.sections)

    def test_input_not_mutated(self, many_options):
        before = [[s.section_id for s in c.sections] for c in many_options]
        ScheduleBuilder(rng=random.Random(3)).build(many_options)
        ScheduleBuilder(rng=random.Random(3)).build_ignoring_conflicts(many_options)
        after = [[s.section_id for s in c.sections] for c in many_options]
        assert before == after

    def test_deep_backtracking_finds_solution(self):
        """Drei Kurse teilen sich drei Tage um 9 Uhr, zwei Kurse drei Tage um 10 Uhr."""
        courses = []
        sid = 0
        for c_idx in range(5):
            sections = []
            for day in range(3):
                sid += 1
                sections.append(make_section(sid, [day], f"{9 + c_idx % 2:02d}:00",
                                             f"{10 + c_idx % 2:02d}:00"))
            courses.append(make_course(f"D{c_idx}", sections))
        for seed in range(10):
            result = ScheduleBuilder(rng=random.Random(seed)).build(courses)
            assert result.ok
            assert_conflict_free(result.sections)

    def test_infeasible_with_explanations_from_all_levels(self):
        """Drei Kurse um 9 Uhr, aber nur zwei Tage → unlösbar, alle Kurse im Report."""
        courses = []
        sid = 0
        for c_idx in range(3):
            sections = []
            for day in range(2):
                sid += 1
                sections.append(make_section(sid, [day], "09:00", "10:00"))
            courses.append(make_course(f"P{c_idx}", sections))
        result = ScheduleBuilder(rng=random.Random(0)).build(courses)
        assert not result.ok
        assert not result.aborted
        text = result.report.describe()
        for c_idx in range(3):
            assert f"TST P{c_idx}" in text

    def test_allow_non_open_from_builder_default(self):
        a1 = make_section(1, [0], "09:00", "10:00", status=ClassStatus.CLOSED)
        builder = ScheduleBuilder(allow_non_open=True)
        assert builder.build([make_course("A", [a1])]).ok
        # Expliziter Parameter hat Vorrang
        assert not builder.build([make_course("A", [a1])], allow_non_open=False).ok


# ─── BUILD OHNE KONFLIKTPRÜFUNG ───────────────────────────────────────────────

class TestBuildIgnoringConflicts:
    def test_conflicting_sections_accepted(self):
        a1 = make_section(1, [0], "09:00", "10:00")
        b1 = make_section(2, [0], "09:00", "10:00")
        result = ScheduleBuilder().build_ignoring_conflicts(
            [make_course("A", [a1]), make_course("B", [b1])],
        )
        assert result.ok
        assert result.sections == [a1, b1]
        assert not result.conflicts_checked

    def test_only_open_sections_chosen(self):
        closed = make_section(1, [0], "09:00", "10:00", status=ClassStatus.CLOSED)
        open_ = make_section(2, [1], "09:00", "10:00")
        for seed in range(10):
            result = ScheduleBuilder(rng=random.Random(seed)).build_ignoring_conflicts(
                [make_course("A", [closed, open_])],
            )
            assert result.sections == [open_]

    def test_course_without_eligible_section_fails(self):
        """Ein Kurs ohne wählbare Sektion beendet die Suche, unabhängig von anderen Kursen."""
        closed = make_section(1, [0], "09:00", "10:00", status=ClassStatus.CLOSED)
        fine = make_section(2, [1], "09:00", "10:00")
        courses = [make_course("OK", [fine]), make_course("ZU", [closed])]
        result = ScheduleBuilder().build_ignoring_conflicts(courses)
        assert not result.ok
        assert result.report.lines == ["Keine wählbare Sektion für Kurs: TST ZU – Kurs ZU"]

    def test_allow_non_open(self):
        closed = make_section(1, [0], "09:00", "10:00", status=ClassStatus.CLOSED)
        result = ScheduleBuilder().build_ignoring_conflicts(
            [make_course("A", [closed])], allow_non_open=True,
        )
        assert result.sections == [closed]

    def test_schedule_flagged(self):
        a1 = make_section(1, [0], "09:00", "10:00")
        result = ScheduleBuilder().build_ignoring_conflicts([make_course("A", [a1])])
        schedule = result.to_schedule("Notlösung", 2258)
        assert schedule.conflicts_ignored
        assert schedule.block_out_sections is None


# ─── ERGEBNIS & BUDGET ────────────────────────────────────────────────────────

class TestBuildResult:
    def test_to_schedule(self, two_courses):
        result = ScheduleBuilder().build(two_courses, [])
        schedule = result.to_schedule("Mein Plan", 2258, [])
        assert schedule.name == "Mein Plan"
        assert schedule.semester_number == 2258
        assert schedule.schedule_id == 0
        assert list(schedule.selected_sections) == result.sections
        assert schedule.block_out_sections == ()
        assert not schedule.conflicts_ignored

    def test_to_schedule_on_failure_raises(self):
        result = BuildResult(sections=None, report=ConflictReport("kaputt"))
        with pytest.raises(NoSchedulesPossibleError) as exc_info:
            result.to_schedule("x", 1)
        assert exc_info.value.report.describe() == "kaputt"


class TestSearchBudget:
    def test_step_limit_aborts(self, many_options):
        builder = ScheduleBuilder(budget=SearchBudget(max_steps=1))
        result = builder.build(many_options)
        assert not result.ok
        assert result.aborted
        assert "Schrittlimit" in result.report.describe()

    def test_cancel_aborts(self, many_options):
        budget = SearchBudget()
        budget.cancel()
        result = ScheduleBuilder(budget=budget).build(many_options)
        assert result.aborted
        assert "abgebrochen" in result.report.describe()

    def test_generous_budget_counts_steps(self, two_courses):
        builder = ScheduleBuilder(rng=NoShuffle(), budget=SearchBudget(max_steps=100))
        result = builder.build(two_courses)
        assert result.ok
        # A1, B1 (Konflikt), B2
        assert result.steps == 3

    def test_budget_reset_between_runs(self, two_courses):
        builder = ScheduleBuilder(rng=NoShuffle(), budget=SearchBudget(max_steps=3))
        assert builder.build(two_courses).ok
        assert builder.build(two_courses).ok

    def test_time_limit_expires(self):
        budget = SearchBudget(time_limit_seconds=1e-9)
        budget.start()
        time.sleep(0.001)
        assert budget.consume() is not None

    def test_from_config(self):
        config = PlannerConfig(
            allow_non_open_classes=True,
            search=SearchConfig(max_steps=7, time_limit_seconds=2.5),
        )
        builder = ScheduleBuilder.from_config(config, rng=random.Random(0))
        assert builder.allow_non_open
        assert builder.budget.max_steps == 7
        assert builder.budget.time_limit_seconds == 2.5

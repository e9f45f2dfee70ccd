"""Tests for the draft/baseline diff."""

from src.timetable.diff import canonical_json, canonical_set, compute_diff, format_diff_summary
from tests.helpers import make_block


class TestComputeDiff:

    def test_identical_lists_are_empty(self, baseline):
        diff = compute_diff(baseline, [b.model_copy() for b in baseline])
        assert diff.is_empty()
        assert diff.unchanged_count == 3

    def test_order_does_not_matter(self, baseline):
        diff = compute_diff(baseline, list(reversed(baseline)))
        assert diff.is_empty()

    def test_partition_by_id(self, baseline):
        draft = [
            baseline[0],
            make_block("b", "tuesday", "10:00", "11:30", notes="lab"),  # changed end
            make_block("d", "friday", "08:00", "09:00"),  # new
        ]
        diff = compute_diff(baseline, draft)

        assert [b.id for b in diff.to_create] == ["d"]
        assert [b.id for b in diff.to_update] == ["b"]
        assert [b.id for b in diff.to_delete] == ["c"]
        assert diff.unchanged_count == 1

        ids = [b.id for b in diff.to_create + diff.to_update + diff.to_delete]
        assert len(ids) == len(set(ids))
        assert set(ids) | {"a"} == {"a", "b", "c", "d"}

    def test_update_carries_draft_values(self, baseline):
        draft = [make_block("a", "thursday", "09:00", "10:00")] + baseline[1:]
        diff = compute_diff(baseline, draft)
        assert diff.to_update[0].day_of_week.value == "thursday"

    def test_any_field_counts_as_change(self, baseline):
        draft = [baseline[0].model_copy(update={"color": "#e0f2f1"})] + baseline[1:]
        assert [b.id for b in compute_diff(baseline, draft).to_update] == ["a"]

    def test_empty_baseline_creates_everything(self, baseline):
        diff = compute_diff([], baseline)
        assert [b.id for b in diff.to_create] == ["a", "b", "c"]
        assert not diff.to_update and not diff.to_delete

    def test_empty_draft_deletes_everything(self, baseline):
        diff = compute_diff(baseline, [])
        assert [b.id for b in diff.to_delete] == ["a", "b", "c"]

    def test_to_dict_uses_wire_names(self, baseline):
        diff = compute_diff([], baseline[:1])
        created = diff.to_dict()["to_create"][0]
        assert created["startTime"] == "09:00"
        assert created["dayOfWeek"] == "monday"


class TestCanonicalSerialization:

    def test_field_order_independent(self):
        a = make_block("x", notes="n", title="Math")
        b = make_block("x", title="Math", notes="n")
        assert canonical_json(a) == canonical_json(b)

    def test_set_sorted_by_id(self):
        one = [make_block("b"), make_block("a")]
        two = [make_block("a"), make_block("b")]
        assert canonical_set(one) == canonical_set(two)


class TestFormatDiffSummary:

    def test_counts_and_markers(self, baseline):
        draft = [baseline[0], make_block("d", "friday", "08:00", "09:00", title="Art")]
        text = format_diff_summary(compute_diff(baseline, draft))
        assert "Create: 1" in text
        assert "Delete: 2" in text
        assert "+ [d] friday 08:00-09:00 Art" in text
        assert "- [b]" in text

    def test_truncates_long_lists(self):
        draft = [make_block(f"n{i}") for i in range(12)]
        text = format_diff_summary(compute_diff([], draft), limit=10)
        assert "... and 2 more" in text

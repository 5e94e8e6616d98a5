from __future__ import annotations

import datetime as dt
import unittest

from ganttly.builder import PipelineContext, build_tasks, count_by_board, derive_all, derive_tasks
from ganttly.layout import compute_layout
from ganttly.model import Board, FieldValue, GanttSettings, Group, Item, MirrorMapping


def _tl(start: str, end: str) -> FieldValue:
    return FieldValue(id="tl", title="Timeline", type="timeline", value=f'{{"from": "{start}", "to": "{end}"}}')


def _item(iid: str, name: str, *fields: FieldValue, group_id=None, subitems=()) -> Item:
    return Item(id=iid, name=name, fields=tuple(fields), group_id=group_id, subitems=tuple(subitems))


BOARD = Board(
    id="101",
    name="Roadmap",
    groups=(Group(id="g1", title="Planned", color="#579bfc"), Group(id="g2", title="Done", color="#00c875")),
)


class TestTaskBuilderContract(unittest.TestCase):
    def test_items_without_dates_are_dropped(self) -> None:
        items = [
            _item("1", "Alpha", _tl("2024-03-01", "2024-03-03"), group_id="g1"),
            _item("2", "Undated", group_id="g1"),
            _item("3", "Broken", FieldValue("tl", "Timeline", "timeline", "{oops"), group_id="g1"),
        ]
        tasks = build_tasks(items, BOARD, GanttSettings())
        self.assertEqual([t.id for t in tasks], ["1"])

        t = tasks[0]
        self.assertEqual((t.start, t.end), (dt.date(2024, 3, 1), dt.date(2024, 3, 3)))
        self.assertEqual(t.group, "Planned")
        self.assertEqual(t.color, "#579bfc")
        self.assertEqual((t.board_id, t.board_name), ("101", "Roadmap"))
        self.assertIsNone(t.parent_id)
        self.assertIs(t.item, items[0])

    def test_one_sided_range_is_kept_as_given(self) -> None:
        half = _item("1", "Open ended", FieldValue("tl", "Timeline", "timeline", '{"from": "2024-01-10"}'))
        dated = _item("2", "Dated", _tl("2024-01-12", "2024-01-14"))
        tasks = derive_tasks([half, dated], BOARD, GanttSettings())

        self.assertEqual([t.id for t in tasks], ["1", "2"])
        self.assertEqual(tasks[0].start, dt.date(2024, 1, 10))
        self.assertIsNone(tasks[0].end)

        layout = compute_layout(tasks, 1280)
        self.assertEqual([r.task.id for r in layout.rows], ["2"])
        self.assertEqual(layout.window.start, dt.date(2024, 1, 5))
        self.assertTrue(compute_layout(tasks[:1], 1280).empty)

    def test_subitems_follow_parent_one_level(self) -> None:
        grandchild = _item("1a-i", "Too deep", _tl("2024-03-02", "2024-03-02"))
        child = _item("1a", "Design", _tl("2024-03-02", "2024-03-02"), subitems=[grandchild])
        undated_child = _item("1b", "Notes")
        parent = _item("1", "Alpha", _tl("2024-03-01", "2024-03-03"), group_id="g1", subitems=[child, undated_child])

        tasks = build_tasks([parent], BOARD, GanttSettings())
        self.assertEqual([t.id for t in tasks], ["1", "1a"])
        self.assertEqual(tasks[1].parent_id, "1")
        self.assertEqual(tasks[1].group, "Planned")

        hidden = build_tasks([parent], BOARD, GanttSettings(show_subitems=False))
        self.assertEqual([t.id for t in hidden], ["1"])

    def test_children_of_dropped_parent_are_dropped(self) -> None:
        child = _item("1a", "Design", _tl("2024-03-02", "2024-03-02"))
        parent = _item("1", "Undated", subitems=[child])
        self.assertEqual(build_tasks([parent], BOARD, GanttSettings()), [])

    def test_subitems_use_owning_board_mappings(self) -> None:
        mapping = MirrorMapping("202", "Teams", "team", "Team", "m1", "Owner Team", "101")
        child = _item(
            "1a",
            "Design",
            _tl("2024-03-02", "2024-03-02"),
            FieldValue("m1", "Owner Team", "mirror", '{"ids": [1]}', "Platform"),
        )
        parent = _item("1", "Alpha", _tl("2024-03-01", "2024-03-03"), subitems=[child])
        tasks = build_tasks([parent], BOARD, GanttSettings(group_by_column="m1"), [mapping])
        self.assertEqual(tasks[1].mirror_data["m1"].source_board_name, "Teams")
        self.assertEqual(tasks[1].group, "Platform")

    def test_derive_sorts_when_configured(self) -> None:
        items = [
            _item("1", "beta", _tl("2024-03-05", "2024-03-06")),
            _item("2", "Alpha", _tl("2024-03-01", "2024-03-02")),
        ]
        asc = derive_tasks(items, BOARD, GanttSettings(sort_by_column="name", sort_direction="asc"))
        self.assertEqual([t.name for t in asc], ["Alpha", "beta"])
        unsorted = derive_tasks(items, BOARD, GanttSettings())
        self.assertEqual([t.name for t in unsorted], ["beta", "Alpha"])

    def test_derive_is_deterministic(self) -> None:
        items = [_item("1", "A", _tl("2024-03-01", "2024-03-03"), group_id="g2")]
        a = derive_tasks(items, BOARD, GanttSettings())
        b = derive_tasks(items, BOARD, GanttSettings())
        self.assertEqual(a, b)


class TestDeriveAllContract(unittest.TestCase):
    def test_selected_boards_and_unknown_boards(self) -> None:
        other = Board(id="202", name="Teams")
        ctx = PipelineContext(
            boards=(BOARD, other),
            items_by_board={
                "101": [_item("1", "Alpha", _tl("2024-03-01", "2024-03-03"))],
                "202": [_item("10", "Team", _tl("2024-04-01", "2024-04-02"))],
                "999": [_item("x", "Ghost", _tl("2024-04-01", "2024-04-02"))],
            },
        )
        everything = derive_all(ctx, GanttSettings())
        self.assertEqual([t.id for t in everything], ["1", "10"])
        self.assertEqual(count_by_board(everything), {"101": 1, "202": 1})

        only = derive_all(ctx, GanttSettings(selected_boards=("202",)))
        self.assertEqual([t.id for t in only], ["10"])
        self.assertEqual(only[0].board_name, "Teams")


if __name__ == "__main__":
    unittest.main(verbosity=2)

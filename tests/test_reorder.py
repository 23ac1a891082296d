"""Tests for ordered collections and the reorder planner."""

from wedding_planner_api.app.services.document_service import document_partition
from wedding_planner_api.app.services.task_service import organizer_task_partition
from wedding_planner_api.app.state.collections import OrderedCollection, plan_reorder, sort_by_order


def _tasks(*ids):
    return [{"id": item_id, "order": index} for index, item_id in enumerate(ids)]


def _board():
    return OrderedCollection(
        [
            {"id": "a1", "task_group_id": "A", "order": 0},
            {"id": "a2", "task_group_id": "A", "order": 1},
            {"id": "a3", "task_group_id": "A", "order": 2},
            {"id": "b1", "task_group_id": "B", "order": 0},
            {"id": "u1", "task_group_id": None, "order": 0},
        ],
        partition_of=organizer_task_partition,
        partition_field="task_group_id",
    )


class TestSortByOrder:
    def test_ordered_first_then_newest(self):
        items = [
            {"id": "old", "created_at": "2024-01-01"},
            {"id": "second", "order": 1},
            {"id": "new", "created_at": "2024-03-01"},
            {"id": "first", "order": 0},
        ]
        assert [i["id"] for i in sort_by_order(items)] == ["first", "second", "new", "old"]


class TestPlanReorder:
    def test_move_down_within_partition(self):
        collection = OrderedCollection(_tasks("t1", "t2", "t3", "t4"))
        plan = plan_reorder(collection, "t1", "t3")
        assert [i["id"] for i in plan.items] == ["t2", "t3", "t1", "t4"]
        assert [i["order"] for i in plan.items] == [0, 1, 2, 3]

    def test_move_up_within_partition(self):
        collection = OrderedCollection(_tasks("t1", "t2", "t3", "t4"))
        plan = plan_reorder(collection, "t4", "t2")
        assert [i["id"] for i in plan.items] == ["t1", "t4", "t2", "t3"]

    def test_updates_cover_whole_partition(self):
        collection = OrderedCollection(_tasks("t1", "t2", "t3"))
        plan = plan_reorder(collection, "t3", "t1")
        assert plan.updates == [
            {"id": "t3", "order": 0},
            {"id": "t1", "order": 1},
            {"id": "t2", "order": 2},
        ]
        assert not plan.partition_changed

    def test_unordered_items_get_dense_orders(self):
        collection = OrderedCollection(
            [
                {"id": "x", "created_at": "2024-01-01"},
                {"id": "y", "created_at": "2024-02-01"},
                {"id": "z", "created_at": "2024-03-01"},
            ]
        )
        plan = plan_reorder(collection, "x", "z")
        assert [i["id"] for i in plan.items] == ["x", "z", "y"]
        assert [i["order"] for i in plan.items] == [0, 1, 2]

    def test_same_id_is_noop(self):
        collection = OrderedCollection(_tasks("t1", "t2"))
        assert plan_reorder(collection, "t1", "t1") is None

    def test_unknown_ids_are_noop(self):
        collection = OrderedCollection(_tasks("t1", "t2"))
        assert plan_reorder(collection, "nope", "t1") is None
        assert plan_reorder(collection, "t1", "nope") is None
        assert plan_reorder(collection, "t1") is None

    def test_plan_does_not_touch_collection(self):
        collection = OrderedCollection(_tasks("t1", "t2", "t3"))
        before = collection.snapshot()
        plan_reorder(collection, "t1", "t3")
        assert collection.items == before

    def test_move_onto_task_in_other_group(self):
        collection = _board()
        plan = plan_reorder(collection, "a2", "b1")
        assert plan.partition_changed
        by_id = {i["id"]: i for i in plan.items}
        assert by_id["a2"]["task_group_id"] == "B"
        assert [i["id"] for i in plan.items if i["task_group_id"] == "B"] == ["a2", "b1"]
        assert [by_id[i]["order"] for i in ("a1", "a3")] == [0, 1]
        assert {"id": "a2", "order": 0, "task_group_id": "B"} in plan.updates

    def test_drop_on_column_appends(self):
        collection = _board()
        plan = plan_reorder(collection, "a1", target_partition="B")
        b_column = [i for i in plan.items if i["task_group_id"] == "B"]
        assert [i["id"] for i in b_column] == ["b1", "a1"]
        assert [i["order"] for i in b_column] == [0, 1]

    def test_drop_on_unsorted_column(self):
        collection = _board()
        plan = plan_reorder(collection, "b1", target_partition=None)
        unsorted = [i for i in plan.items if i["task_group_id"] is None]
        assert [i["id"] for i in unsorted] == ["u1", "b1"]
        assert {"id": "b1", "order": 1, "task_group_id": None} in plan.updates

    def test_drop_on_own_column_is_noop(self):
        assert plan_reorder(_board(), "a1", target_partition="A") is None

    def test_untouched_partition_keeps_orders(self):
        collection = _board()
        plan = plan_reorder(collection, "a3", "a1")
        assert {u["id"] for u in plan.updates} == {"a1", "a2", "a3"}
        untouched = [i for i in plan.items if i["id"] in ("b1", "u1")]
        assert untouched == [
            {"id": "b1", "task_group_id": "B", "order": 0},
            {"id": "u1", "task_group_id": None, "order": 0},
        ]

    def test_documents_reject_cross_partition_drop(self):
        collection = OrderedCollection(
            [
                {"id": "p1", "pinned": True, "order": 0},
                {"id": "d1", "pinned": False, "order": 0},
                {"id": "d2", "pinned": False, "order": 1},
            ],
            partition_of=document_partition,
        )
        assert plan_reorder(collection, "d1", "p1") is None
        plan = plan_reorder(collection, "d2", "d1")
        assert [i["id"] for i in plan.items if not i["pinned"]] == ["d2", "d1"]


class TestOrderedCollection:
    def test_partition_and_ordered(self):
        collection = _board()
        assert [i["id"] for i in collection.partition("A")] == ["a1", "a2", "a3"]
        assert collection.partition_keys() == ["A", "B", None]
        assert len(collection.ordered()) == 5

    def test_mutations(self):
        collection = OrderedCollection(_tasks("t1", "t2"))
        collection.update("t1", status="completed")
        assert collection.find("t1")["status"] == "completed"
        assert collection.replace({"id": "t2", "order": 5})
        assert collection.find("t2") == {"id": "t2", "order": 5}
        assert collection.remove("t1")["id"] == "t1"
        collection.add({"id": "t3"})
        assert collection.ids() == ["t2", "t3"]

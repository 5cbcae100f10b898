"""Tests for ArcGraphService mutations, working set and notifications."""

import pytest

from tubenet.routing.arc_service import ArcGraphService


@pytest.fixture
def events(service):
    received = []
    service.subscribe(received.append)
    return received


def _arc(service, instance, origin, destination, tube_id=0):
    return service.create_arc(
        instance.city(origin), instance.city(destination), instance.tube(tube_id)
    )


class TestCreateAndAdd:
    def test_create_registers_everywhere_without_notifying(
        self, instance, service, events, check_mirrors
    ):
        arc = _arc(service, instance, 0, 1)
        assert instance.arcs[arc.id] is arc
        assert instance.city(0).outgoing_arcs == [arc.id]
        assert instance.city(1).incoming_arcs == [arc.id]
        assert instance.tube(0).arc_ids == [arc.id]
        assert events == []
        assert service.working_set == ()
        check_mirrors(instance)

    def test_add_arc_notifies_once(self, instance, service, events, check_mirrors):
        arc = _arc(service, instance, 0, 1)
        service.add_arc(arc)
        assert len(events) == 1
        change = events[0]
        assert change.operation == "add_arc"
        assert change.arc_id == arc.id
        assert change.tube_id == 0
        assert change.working_set == (arc.id,)
        assert service.working_arcs() == [arc]
        check_mirrors(instance)

    def test_add_arc_is_idempotent_on_lists(self, instance, service):
        arc = _arc(service, instance, 0, 1)
        service.add_arc(arc)
        service.add_arc(arc)
        assert instance.tube(0).arc_ids == [arc.id]
        assert service.working_set == (arc.id,)

    def test_self_loop_is_constructible(self, instance, service, check_mirrors):
        arc = _arc(service, instance, 2, 2)
        assert arc.is_self_loop
        check_mirrors(instance)


class TestEndpoints:
    def test_set_origin_moves_mirror(self, instance, service, events, check_mirrors):
        arc = _arc(service, instance, 0, 1)
        service.set_arc_origin(arc, instance.city(2))
        assert arc.origin_id == 2
        assert instance.city(0).outgoing_arcs == []
        assert instance.city(2).outgoing_arcs == [arc.id]
        assert [e.operation for e in events] == ["set_arc_origin"]
        check_mirrors(instance)

    def test_set_destination_moves_mirror(self, instance, service, events, check_mirrors):
        arc = _arc(service, instance, 0, 1)
        service.set_arc_destination(arc, instance.city(3))
        assert arc.destination_id == 3
        assert instance.city(1).incoming_arcs == []
        assert instance.city(3).incoming_arcs == [arc.id]
        assert [e.operation for e in events] == ["set_arc_destination"]
        check_mirrors(instance)

    def test_reroute_both_endpoints_notifies_once(
        self, instance, service, events, check_mirrors
    ):
        arc = _arc(service, instance, 0, 1)
        service.reroute_arc(arc, instance.city(2), instance.city(3))
        assert (arc.origin_id, arc.destination_id) == (2, 3)
        assert len(events) == 1
        assert events[0].operation == "reroute_arc"
        check_mirrors(instance)

    def test_unchanged_endpoints_keep_list_order(
        self, instance, service, events, check_mirrors
    ):
        first = _arc(service, instance, 0, 1)
        second = _arc(service, instance, 0, 2)
        third = _arc(service, instance, 3, 1)
        service.set_arc_origin(first, instance.city(0))
        service.set_arc_destination(first, instance.city(1))
        service.reroute_arc(first, instance.city(0), instance.city(1))
        assert instance.city(0).outgoing_arcs == [first.id, second.id]
        assert instance.city(1).incoming_arcs == [first.id, third.id]
        assert [e.operation for e in events] == [
            "set_arc_origin",
            "set_arc_destination",
            "reroute_arc",
        ]
        check_mirrors(instance)


class TestDelete:
    def test_delete_removes_arc_everywhere(self, instance, service, events, check_mirrors):
        keep = _arc(service, instance, 0, 1)
        gone = _arc(service, instance, 1, 2)
        service.set_working_set([keep.id, gone.id])
        events.clear()

        service.delete_arc(gone)

        assert gone.id not in instance.arcs
        assert instance.city(1).outgoing_arcs == []
        assert instance.city(2).incoming_arcs == []
        assert instance.tube(0).arc_ids == [keep.id]
        assert service.working_set == (keep.id,)
        assert len(events) == 1
        assert events[0].operation == "delete_arc"
        assert events[0].arc_id == gone.id
        assert events[0].tube_id == 0
        check_mirrors(instance)

    def test_deleted_id_not_reused(self, instance, service):
        first = _arc(service, instance, 0, 1)
        service.delete_arc(first)
        second = _arc(service, instance, 0, 1)
        assert second.id != first.id


class TestWorkingSetAndObservers:
    def test_set_working_set_notifies_without_arc(self, instance, service, events):
        arc = _arc(service, instance, 0, 1)
        service.set_working_set([arc.id])
        assert events[-1].operation == "set_working_set"
        assert events[-1].arc_id is None
        assert events[-1].tube_id is None
        assert events[-1].working_set == (arc.id,)

    def test_set_working_set_rejects_unknown_arc(self, service):
        with pytest.raises(KeyError):
            service.set_working_set([12])

    def test_unsubscribe(self, instance):
        service = ArcGraphService(instance)
        received = []
        unsubscribe = service.subscribe(received.append)
        unsubscribe()
        unsubscribe()
        service.add_arc(_arc(service, instance, 0, 1))
        assert received == []

    def test_all_subscribers_called(self, instance):
        service = ArcGraphService(instance)
        first, second = [], []
        service.subscribe(first.append)
        service.subscribe(second.append)
        service.add_arc(_arc(service, instance, 0, 1))
        assert len(first) == len(second) == 1

    def test_path_queries_delegate(self, instance, service):
        ab = _arc(service, instance, 0, 1)
        tube = instance.tube(0)
        assert service.path_exists(instance.city(0), instance.city(1), tube)
        assert service.find_path(instance.city(0), instance.city(1), tube).arcs == (ab.id,)

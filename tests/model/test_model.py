"""Tests for the instance arena: construction, lookups and iteration."""

import pytest

from tubenet.model.instance import Arc, City, Instance


class TestConstruction:
    def test_duplicate_city_rejected(self, instance):
        with pytest.raises(ValueError, match="already exists"):
            instance.add_city(City(id=0, name="Again"))

    def test_add_cohort_flags_city(self, instance):
        assert instance.city(0).is_cohort
        assert not instance.city(1).is_cohort
        assert instance.cohort_at(0).patient_count == 2
        assert instance.cohort_at(1) is None

    def test_second_cohort_on_same_city_rejected(self, instance):
        with pytest.raises(ValueError, match="already hosts a cohort"):
            instance.add_cohort(0, 5)

    def test_add_cohort_unknown_city(self, instance):
        with pytest.raises(KeyError):
            instance.add_cohort(42, 1)

    def test_duplicate_type_name_rejected(self, instance):
        with pytest.raises(ValueError, match="already has type 'T1'"):
            instance.add_type(0, "T1")

    def test_tubes_numbered_per_type(self, instance):
        numbers = [instance.tubes[t].number for t in instance.type(1).tube_ids]
        assert numbers == [1, 2]
        assert instance.type(1).tube_ids == [2, 3]

    def test_arc_ids_never_reused(self):
        instance = Instance()
        assert [instance.new_arc_id() for _ in range(3)] == [0, 1, 2]
        assert instance.new_arc_id() == 3


class TestLookups:
    def test_strict_lookups_raise_key_error(self, instance):
        for lookup in (instance.city, instance.cohort, instance.type, instance.tube, instance.arc):
            with pytest.raises(KeyError, match="not found"):
                lookup(99)

    def test_optional_lookups(self, instance):
        assert instance.find_city(3).name == "D"
        assert instance.find_city(99) is None
        assert instance.find_city_by_name("C").id == 2
        assert instance.find_city_by_name("C [2]").id == 2
        assert instance.find_city_by_name("Z") is None

    def test_find_tube_by_cohort_type_and_number(self, instance):
        tube = instance.find_tube(0, "T2", 2)
        assert tube is not None and tube.id == 3
        assert instance.find_tube(0, "T2", 3) is None
        assert instance.find_tube(0, "T9", 1) is None

    def test_tube_relations(self, instance):
        tube = instance.tube(2)
        assert instance.type_of(tube).name == "T2"
        assert instance.cohort_of(tube).id == 0
        assert instance.cohort_city(tube).name == "A"

    def test_outgoing_filters_by_tube(self, instance):
        a = instance.city(0)
        for arc_id, tube_id in ((0, 0), (1, 2)):
            instance.arcs[arc_id] = Arc(id=arc_id, origin_id=0, destination_id=1, tube_id=tube_id)
            a.outgoing_arcs.append(arc_id)
        assert [arc.id for arc in instance.outgoing(a)] == [0, 1]
        assert [arc.id for arc in instance.outgoing(a, instance.tube(2))] == [1]


class TestDescriptions:
    def test_display_name(self):
        assert City(id=3, name="Lyon").display_name == "Lyon [3]"

    def test_demand_defaults_to_zero(self):
        city = City(id=1, name="B", demands={"T1": 4})
        assert city.demand("T1") == 4
        assert city.demand("T2") == 0

    def test_describe_tube(self, instance):
        assert instance.describe_tube(instance.tube(3)) == "tube n°2 of type T2 of cohort A [0]"

    def test_iter_tubes_in_cohort_type_tube_order(self, instance):
        order = [(c.id, t.name, tube.number) for c, t, tube in instance.iter_tubes()]
        assert order == [(0, "T1", 1), (0, "T1", 2), (0, "T2", 1), (0, "T2", 2)]

    def test_self_loop_property(self):
        assert Arc(id=0, origin_id=1, destination_id=1, tube_id=0).is_self_loop
        assert not Arc(id=0, origin_id=1, destination_id=2, tube_id=0).is_self_loop

import pytest

from agrimanage.extensions import db
from agrimanage.errors import (
    NotFound,
    ReferentialIntegrityError,
    UnexpectedShapeError,
    ValidationError,
)
from agrimanage.models import Disease, Plant
from agrimanage.services.relations import (
    diseases,
    diseases_for_plant,
    plants,
)


def make_plant(name='Rice', **fields):
    return plants.create(dict(name=name, **fields))


class TestCreate:

    def test_assigns_id_and_normalizes_fertilizers(self, app):
        plant = make_plant(fertilizers='Urea')

        assert plant.id is not None
        assert plant.fertilizers == ['Urea']
        assert plants.get_by_id(plant.id).to_dict()['fertilizers'] == ['Urea']

    def test_missing_required_fields(self, app):
        with pytest.raises(ValidationError) as excinfo:
            plants.create({'climate': 'Dry'})
        assert excinfo.value.details == {'missing_fields': ['name']}

    def test_blank_required_field(self, app):
        with pytest.raises(ValidationError):
            plants.create({'name': '   '})

    def test_payload_must_be_an_object(self, app):
        with pytest.raises(UnexpectedShapeError):
            plants.create(['Rice'])

    def test_scalar_field_given_an_object(self, app):
        with pytest.raises(UnexpectedShapeError):
            plants.create({'name': {'en': 'Rice'}})

    def test_child_requires_existing_parent(self, app):
        with pytest.raises(ValidationError):
            diseases.create({'name': 'Blast', 'plantId': 999})

    def test_child_parent_must_be_an_id(self, app):
        with pytest.raises(ValidationError):
            diseases.create({'name': 'Blast', 'plantId': 'rice'})

    def test_failed_write_leaves_nothing_behind(self, app):
        with pytest.raises(ValidationError):
            make_plant(date='not a date')
        assert Plant.query.count() == 0


class TestRead:

    def test_unknown_id(self, app):
        with pytest.raises(NotFound) as excinfo:
            plants.get_by_id(42)
        assert excinfo.value.message == 'Plant not found'

    def test_children_partition_by_parent(self, app):
        rice, tomato, chilli = make_plant('Rice'), make_plant('Tomato'), make_plant('Chilli')
        for parent, names in ((rice, ['Blast', 'Sheath Blight']),
                              (tomato, ['Early Blight', 'Blast']),
                              (chilli, [])):
            for name in names:
                diseases.create({'name': name, 'plantId': parent.id})

        listed = {
            parent.id: diseases_for_plant(parent.id)
            for parent in (rice, tomato, chilli)
        }

        assert [d.name for d in listed[rice.id]] == ['Blast', 'Sheath Blight']
        assert [d.name for d in listed[tomato.id]] == ['Early Blight', 'Blast']
        assert listed[chilli.id] == []
        assert all(d.plant_id == pid for pid, items in listed.items() for d in items)
        assert sum(len(items) for items in listed.values()) == Disease.query.count()

    def test_children_of_missing_parent(self, app):
        assert diseases_for_plant(12345) == []


class TestUpdate:

    def test_replaces_only_given_fields(self, app):
        plant = make_plant(climate='Tropical', fertilizers=['Urea'])

        updated = plants.update(plant.id, {'fertilizers': 'Compost'})

        assert updated.climate == 'Tropical'
        assert updated.fertilizers == ['Compost']

    def test_parent_reference_is_immutable(self, app):
        rice, tomato = make_plant('Rice'), make_plant('Tomato')
        blast = diseases.create({'name': 'Blast', 'plantId': rice.id})

        updated = diseases.update(blast.id, {'name': 'Rice Blast', 'plantId': tomato.id})

        assert updated.name == 'Rice Blast'
        assert updated.plant_id == rice.id

    def test_cannot_blank_required_field(self, app):
        plant = make_plant()
        with pytest.raises(ValidationError):
            plants.update(plant.id, {'name': ''})

    def test_unknown_id(self, app):
        with pytest.raises(NotFound):
            plants.update(7, {'name': 'Maize'})


class TestDelete:

    def test_removes_record(self, app):
        plant = make_plant()
        plants.delete(plant.id)
        with pytest.raises(NotFound):
            plants.get_by_id(plant.id)

    def test_parent_with_children_is_protected(self, app):
        plant = make_plant()
        blast = diseases.create({'name': 'Blast', 'plantId': plant.id})

        with pytest.raises(ReferentialIntegrityError) as excinfo:
            plants.delete(plant.id)

        assert excinfo.value.details == {'dependents': 'Disease', 'count': 1}
        assert diseases.get_by_id(blast.id).plant_id == plant.id

    def test_parent_can_go_after_children(self, app):
        plant = make_plant()
        blast = diseases.create({'name': 'Blast', 'plantId': plant.id})

        diseases.delete(blast.id)
        plants.delete(plant.id)

        assert db.session.get(type(plant), plant.id) is None


def test_read_back_matches_every_supplied_field(app):
    plant = make_plant()
    payload = {
        'name': 'Blast',
        'causalAgent': 'Magnaporthe oryzae',
        'diseaseTransmission': 'Airborne spores',
        'diseaseSymptoms': 'Diamond shaped lesions',
        'control': 'Tricyclazole',
        'fertilizers': ['Potash'],
        'imageUrl': 'https://img.example.com/blast.png',
        'plantId': plant.id
    }

    created = diseases.create(payload).to_dict()
    fetched = diseases.get_by_id(created['id']).to_dict()

    assert fetched == created
    for field, value in payload.items():
        assert fetched[field] == value

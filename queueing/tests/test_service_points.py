import pytest
from rest_framework.exceptions import ValidationError

from queueing.exceptions import Conflict
from queueing.models import Counter, Room, User
from queueing.services import service_points

pytestmark = pytest.mark.django_db


@pytest.fixture
def second_teller(branch):
    return User.objects.create_user(username='teller2', password='P@ssw0rd1', variant='bank',
                                    account_type='staff', branch=branch)


def test_counter_number_is_exclusive_per_branch_and_day(teller, second_teller, queue):
    service_points.take_counter(teller, 3, queue)
    with pytest.raises(Conflict):
        service_points.take_counter(second_teller, 3, queue)
    assert 3 not in service_points.available_counters(teller.branch_id)
    assert 4 in service_points.available_counters(teller.branch_id)


def test_same_number_is_free_at_another_branch(teller, other_branch, queue):
    service_points.take_counter(teller, 3, queue)
    elsewhere = User.objects.create_user(username='teller9', password='P@ssw0rd1', variant='bank',
                                         account_type='staff', branch=other_branch)
    counter = service_points.take_counter(elsewhere, 3, queue)
    assert counter.branch_id == other_branch.pk


def test_taking_a_counter_releases_the_previous_one(teller, queue):
    first = service_points.take_counter(teller, 1, queue)
    second = service_points.take_counter(teller, 2, queue)
    first.refresh_from_db()
    assert first.is_active is False
    assert service_points.active_counter(teller) == second
    again = service_points.take_counter(teller, 1, queue)
    assert again.pk == first.pk
    assert Counter.objects.filter(user=teller, is_active=True).count() == 1


def test_counter_number_outside_pool(teller, settings):
    settings.COUNTER_POOL_SIZE = 10
    with pytest.raises(ValidationError):
        service_points.take_counter(teller, 11)


def test_room_taken_by_someone_else_conflicts(nurse, laboratory):
    other = User.objects.create_user(username='nurse2', password='P@ssw0rd1', variant='hospital',
                                     account_type='staff')
    room = service_points.take_room(nurse, laboratory, '2')
    assert room.available is True
    assert service_points.active_room(nurse) == room
    with pytest.raises(Conflict):
        service_points.take_room(other, laboratory, '2')


def test_taking_a_room_releases_the_previous_one(nurse, laboratory, pharmacy):
    lab = service_points.take_room(nurse, laboratory, '1')
    service_points.take_room(nurse, pharmacy, '1')
    lab.refresh_from_db()
    assert lab.is_active is False
    assert service_points.active_room(nurse).department == pharmacy


def test_add_and_update_rooms(laboratory, nurse):
    room = service_points.add_room(laboratory, '5', staff=nurse)
    with pytest.raises(Conflict):
        service_points.add_room(laboratory, '5')
    other = service_points.add_room(laboratory, '6')
    with pytest.raises(Conflict):
        service_points.update_room(other, room_number='5')

    service_points.update_room(room, available=True)
    room.refresh_from_db()
    assert room.staff == nurse and room.available is True
    service_points.update_room(room, staff=None)
    assert Room.objects.get(pk=room.pk).staff is None


def test_released_counter_is_free_like_a_released_room(teller, second_teller, queue):
    counter = service_points.take_counter(teller, 3, queue)
    counter.is_active = False
    counter.save(update_fields=['is_active'])
    assert 3 in service_points.available_counters(teller.branch_id)
    taken = service_points.take_counter(second_teller, 3, queue)
    assert taken.user == second_teller
    assert 3 not in service_points.available_counters(teller.branch_id)


def test_switching_counters_frees_the_old_number(teller, second_teller, queue):
    service_points.take_counter(teller, 1, queue)
    service_points.take_counter(teller, 2, queue)
    assert 1 in service_points.available_counters(teller.branch_id)
    assert service_points.take_counter(second_teller, 1, queue).user == second_teller
    with pytest.raises(Conflict):
        service_points.take_counter(teller, 1, queue)

import pytest
from django.core.cache import cache

from queueing.models import BankQueue, BankQueueSubItem, Branch, Department, User


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttles and the settings payload live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def branch(db):
    return Branch.objects.create(name='Kampala Road', address='Plot 12, Kampala Road')


@pytest.fixture
def other_branch(db):
    return Branch.objects.create(name='Entebbe', address='Airport Road')


@pytest.fixture
def queue(db):
    q = BankQueue.objects.create(name='Deposits')
    BankQueueSubItem.objects.create(queue=q, name='Cash deposit')
    return q


@pytest.fixture
def loans_queue(db):
    return BankQueue.objects.create(name='Loans')


@pytest.fixture
def teller(branch):
    return User.objects.create_user(username='teller1', password='P@ssw0rd1', variant='bank',
                                    account_type='staff', branch=branch)


@pytest.fixture
def reception(db):
    return Department.objects.create(title='Reception', icon='👋', category='Administration')


@pytest.fixture
def laboratory(db):
    return Department.objects.create(title='Laboratory', icon='🧪', category='Diagnostics')


@pytest.fixture
def pharmacy(db):
    return Department.objects.create(title='Pharmacy', icon='💊', category='Payment')


@pytest.fixture
def nurse(reception):
    return User.objects.create_user(username='nurse1', password='P@ssw0rd1', variant='hospital',
                                    account_type='staff', department=reception)

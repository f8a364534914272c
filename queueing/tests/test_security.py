import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from queueing.models import ActivityLog, BankQueue, Branch, User
from queueing.throttles import TicketCreateThrottle

pytestmark = pytest.mark.django_db


def login(client, username, password, **extra):
    return client.post(reverse('login_view'), {'username': username, 'password': password, **extra}, format='json')


def test_no_account_type_bypass_in_login():
    client = APIClient()
    u = User.objects.create_user(username='u1', password='P@ssw0rd1', variant='bank', account_type='kiosk')
    r = login(client, 'u1', 'P@ssw0rd1', role='admin', accountType='admin')
    assert r.status_code == 200
    assert r.data['accountType'] == 'kiosk'
    assert r.data['isAdmin'] is False
    u.refresh_from_db()
    assert u.account_type == 'kiosk'


def test_login_returns_jwt_and_legacy_token():
    client = APIClient()
    User.objects.create_user(username='u_jwt', password='P@ssw0rd1', variant='hospital')
    r = login(client, 'u_jwt', 'P@ssw0rd1')
    assert r.status_code == 200
    assert r.data['jwt_access'] and r.data['jwt_refresh'] and r.data['token']
    assert r.data['variant'] == 'hospital'


def test_failed_login_is_logged():
    User.objects.create_user(username='u2', password='P@ssw0rd1')
    r = login(APIClient(), 'u2', 'wrong-password')
    assert r.status_code == 400
    entry = ActivityLog.objects.get(action='login')
    assert entry.staff is None
    assert entry.details['result'] == 'fail'


def test_login_refuses_the_other_variant():
    User.objects.create_user(username='teller', password='P@ssw0rd1', variant='bank')
    r = login(APIClient(), 'teller', 'P@ssw0rd1', variant='hospital')
    assert r.status_code == 400
    r = login(APIClient(), 'teller', 'P@ssw0rd1', variant='bank')
    assert r.status_code == 200


def test_token_and_bearer_authentication():
    User.objects.create_user(username='display', password='P@ssw0rd1', variant='bank', account_type='display')
    r = login(APIClient(), 'display', 'P@ssw0rd1')

    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")
    assert client.get('/api/session').data['user']['username'] == 'display'

    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['jwt_access']}")
    assert client.get('/api/session').status_code == 200


def test_logout_blacklists_refresh_token():
    User.objects.create_user(username='u3', password='P@ssw0rd1')
    client = APIClient()
    r = login(client, 'u3', 'P@ssw0rd1')
    refresh = r.data['jwt_refresh']
    client.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")
    out = client.post(reverse('jwt_logout'), {'refresh': refresh}, format='json')
    assert out.status_code == 200
    again = APIClient().post(reverse('jwt_refresh'), {'refresh': refresh}, format='json')
    assert again.status_code == 401


def test_user_creation_uses_strong_password_when_missing():
    branch = Branch.objects.create(name='A', address='B')
    admin = User.objects.create_user(username='admin1', password='P@ssw0rd1', variant='bank',
                                     account_type='admin', branch=branch)
    client = APIClient()
    client.force_authenticate(user=admin)
    resp = client.post('/api/bank/users', {'username': 'teller7', 'branchId': branch.id}, format='json')
    assert resp.status_code == 201
    assert resp.data['initialPassword'] and len(resp.data['initialPassword']) >= 12
    assert User.objects.get(username='teller7').check_password(resp.data['initialPassword'])


def test_staff_without_role_cannot_manage_users():
    teller = User.objects.create_user(username='t1', password='P@ssw0rd1', variant='bank', account_type='staff')
    client = APIClient()
    client.force_authenticate(user=teller)
    resp = client.post('/api/bank/users', {'username': 'x', 'accountType': 'admin'}, format='json')
    assert resp.status_code == 403
    assert not User.objects.filter(username='x').exists()


def test_kiosk_account_cannot_change_tickets():
    branch = Branch.objects.create(name='A', address='B')
    queue = BankQueue.objects.create(name='Q')
    kiosk = User.objects.create_user(username='k1', password='P@ssw0rd1', variant='bank', account_type='kiosk',
                                     branch=branch)
    created = APIClient().post('/api/bank/ticket', {'queueId': queue.id, 'branchId': branch.id,
                                                    'issueDescription': 'x'}, format='json')
    client = APIClient()
    client.force_authenticate(user=kiosk)
    resp = client.put(f"/api/bank/ticket/{created.data['data']['id']}", {'ticketStatus': 'Serving'}, format='json')
    assert resp.status_code == 403


def test_ticket_issue_is_throttled(monkeypatch):
    monkeypatch.setattr(TicketCreateThrottle, 'THROTTLE_RATES', {'ticket_create': '2/min'})
    branch = Branch.objects.create(name='A', address='B')
    queue = BankQueue.objects.create(name='Q')
    client = APIClient()
    payload = {'queueId': queue.id, 'branchId': branch.id, 'issueDescription': 'x'}
    codes = [client.post('/api/bank/ticket', payload, format='json').status_code for _ in range(3)]
    assert codes == [201, 201, 429]

"""
Integration tests for the queue management API.

These exercise the kiosk, teller and serving screen flows end to end
through Django REST Framework's APIClient, including account variant
isolation and the normalised error payload.
"""

from datetime import timedelta

from django.utils import timezone
from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from ..models import BankQueue, BankTicket, Branch, Department, HospitalTicket, Role, User


class BankAPITests(APITestCase):
    def setUp(self) -> None:
        self.branch = Branch.objects.create(name='Kampala Road', address='Plot 12')
        self.queue = BankQueue.objects.create(name='Deposits')
        self.loans = BankQueue.objects.create(name='Loans')
        self.admin = User.objects.create_user(username='bank_admin', password='P@ssw0rd1', variant='bank',
                                              account_type='admin', branch=self.branch)
        self.teller = User.objects.create_user(username='teller1', password='P@ssw0rd1', variant='bank',
                                               account_type='staff', branch=self.branch)
        self.teller2 = User.objects.create_user(username='teller2', password='P@ssw0rd1', variant='bank',
                                                account_type='staff', branch=self.branch)
        self.nurse = User.objects.create_user(username='nurse1', password='P@ssw0rd1', variant='hospital',
                                              account_type='staff')

    def authenticate(self, user: User) -> APIClient:
        """Return an authenticated APIClient for the given user."""
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def issue(self) -> dict:
        response = APIClient().post(
            '/api/bank/ticket',
            {'queueId': self.queue.id, 'branchId': self.branch.id, 'issueDescription': 'Deposit <b>cash</b>'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data['data']

    def test_kiosk_issues_tickets_without_signing_in(self):
        first = self.issue()
        second = self.issue()
        self.assertEqual(first['ticketNo'], 'A01')
        self.assertEqual(second['ticketNo'], 'A02')
        self.assertEqual(first['ticketStatus'], 'Not Served')
        self.assertEqual(first['issueDescription'], 'Deposit cash')

    def test_listing_requires_sign_in(self):
        response = APIClient().get('/api/bank/ticket')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_teller_serves_a_ticket(self):
        ticket = self.issue()
        client = self.authenticate(self.teller)
        response = client.post('/api/bank/counter', {'counterNumber': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['counter']['counterNumber'], 3)

        url = f"/api/bank/ticket/{ticket['id']}"
        response = client.put(url, {'ticketStatus': 'Serving'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['counterNumber'], 3)
        response = client.put(url, {'ticketStatus': 'Served'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        # Served is terminal
        response = client.put(url, {'ticketStatus': 'Serving'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['ok'])
        self.assertEqual(response.data['error']['code'], 'invalid_transition')

        response = client.get(url)
        history = [(t['from'], t['to']) for t in response.data['data']['transitionHistory']]
        self.assertEqual(history, [(None, 'Not Served'), ('Not Served', 'Serving'), ('Serving', 'Served')])

    def test_counter_numbers_are_exclusive(self):
        self.authenticate(self.teller).post('/api/bank/counter', {'counterNumber': 3}, format='json')
        response = self.authenticate(self.teller2).post('/api/bank/counter', {'counterNumber': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['code'], 'conflict')
        response = self.authenticate(self.teller2).get('/api/bank/counter/available')
        self.assertNotIn(3, response.data['availableCounters'])

    def test_transfer_to_another_queue(self):
        ticket = self.issue()
        client = self.authenticate(self.teller)
        client.post('/api/bank/counter', {'counterNumber': 1}, format='json')
        client.put(f"/api/bank/ticket/{ticket['id']}", {'ticketStatus': 'Serving'}, format='json')
        response = client.post(f"/api/bank/ticket/{ticket['id']}/transfer",
                               {'queueId': self.loans.id, 'reason': 'loan enquiry'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['queueId'], self.loans.id)
        self.assertEqual(response.data['data']['ticketStatus'], 'Not Served')
        self.assertIsNone(response.data['data']['counterId'])

    def test_dashboard_and_waiting_stats(self):
        self.issue()
        self.issue()
        client = self.authenticate(self.teller)
        response = client.get('/api/bank/dashboard')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totalTickets'], 2)
        self.assertEqual(response.data['waitingTickets'], 2)
        self.assertEqual(sum(response.data['ticketsPerHour']), 2)
        response = client.get('/api/bank/ticket/stats')
        self.assertEqual(response.data['stats'], [{'queueId': self.queue.id, 'count': 2, 'queueName': 'Deposits'}])

    def test_duration_stats_average_served_tickets(self):
        ticket = BankTicket.objects.create(
            ticket_no='A01', branch=self.branch, queue=self.queue, issue_description='x',
            ticket_status='Served', not_served_duration=60, serving_duration=120, total_duration=180,
        )
        response = self.authenticate(self.teller).get('/api/bank/ticket/durationStats',
                                                      {'branchId': self.branch.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['count'], 1)
        self.assertEqual([t['id'] for t in response.data['data']['tickets']], [ticket.id])

    def test_long_backlog_still_lists_todays_ticket(self):
        old = timezone.now() - timedelta(days=3)
        BankTicket.objects.bulk_create([
            BankTicket(ticket_no='A01', branch=self.branch, queue=self.queue, issue_description='walk-out',
                       created_at=old, not_served_at=old)
            for _ in range(500)
        ])
        fresh = self.issue()
        response = self.authenticate(self.teller).get(
            '/api/bank/ticket', {'branchId': self.branch.id, 'status': 'Not Served'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [t['id'] for t in response.data['data']]
        self.assertEqual(len(ids), 501)
        self.assertEqual(ids[-1], fresh['id'])

    def test_duration_stats_list_every_served_ticket(self):
        served = timezone.now() - timedelta(hours=1)
        BankTicket.objects.bulk_create([
            BankTicket(ticket_no='A01', branch=self.branch, queue=self.queue, issue_description='x',
                       ticket_status='Served', served_at=served, total_duration=60)
            for _ in range(501)
        ])
        response = self.authenticate(self.teller).get('/api/bank/ticket/durationStats',
                                                      {'branchId': self.branch.id})
        self.assertEqual(response.data['data']['count'], 501)
        self.assertEqual(len(response.data['data']['tickets']), 501)

    def test_list_filters_by_queue_and_counter(self):
        first = self.issue()
        second = self.issue()
        loans = APIClient().post(
            '/api/bank/ticket',
            {'queueId': self.loans.id, 'branchId': self.branch.id, 'issueDescription': 'Loan'},
            format='json',
        ).data['data']
        client = self.authenticate(self.teller)
        counter_id = client.post('/api/bank/counter', {'counterNumber': 2}, format='json').data['counter']['id']
        client.put(f"/api/bank/ticket/{second['id']}", {'ticketStatus': 'Serving'}, format='json')

        response = client.get('/api/bank/ticket', {'queueId': self.queue.id})
        self.assertEqual([t['id'] for t in response.data['data']], [first['id'], second['id']])
        response = client.get('/api/bank/ticket', {'queueId': self.loans.id})
        self.assertEqual([t['id'] for t in response.data['data']], [loans['id']])
        response = client.get('/api/bank/ticket', {'counterId': counter_id})
        self.assertEqual([t['id'] for t in response.data['data']], [second['id']])

    def test_released_counter_number_can_be_taken_again(self):
        counter_id = self.authenticate(self.teller).post(
            '/api/bank/counter', {'counterNumber': 3}, format='json').data['counter']['id']
        response = self.authenticate(self.teller).delete(f'/api/bank/counter/{counter_id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        client = self.authenticate(self.teller2)
        self.assertIn(3, client.get('/api/bank/counter/available').data['availableCounters'])
        response = client.post('/api/bank/counter', {'counterNumber': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['counter']['userId'], self.teller2.id)

    def test_hospital_accounts_are_kept_out(self):
        response = self.authenticate(self.nurse).get('/api/bank/ticket/stats')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.authenticate(self.nurse).get('/api/bank/users')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_branch_management_needs_role_flag(self):
        payload = {'name': 'Jinja', 'address': 'Main Street'}
        response = self.authenticate(self.teller).post('/api/bank/branches', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.teller.role = Role.objects.create(name='Branch manager', variant='bank',
                                               permissions={'Branches': True})
        self.teller.save()
        response = self.authenticate(self.teller).post('/api/bank/branches', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_settings_are_cached_and_invalidated(self):
        client = self.authenticate(self.admin)
        self.assertIsNone(client.get('/api/bank/settings').data['data'])
        response = client.put('/api/bank/settings', {'companyName': 'Acme Bank'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(client.get('/api/bank/settings').data['data']['companyName'], 'Acme Bank')
        client.put('/api/bank/settings', {'companyName': 'Acme Bank Uganda'}, format='json')
        self.assertEqual(client.get('/api/bank/settings').data['data']['companyName'], 'Acme Bank Uganda')

    def test_retired_endpoints_return_gone(self):
        response = APIClient().get('/api/ticket')
        self.assertEqual(response.status_code, status.HTTP_410_GONE)
        self.assertEqual(response.json()['error']['code'], 'deprecated')

    def test_health_probe(self):
        response = APIClient().get('/healthz')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.json()['ok'])


class HospitalAPITests(APITestCase):
    def setUp(self) -> None:
        self.reception = Department.objects.create(title='Reception', icon='👋', category='Administration')
        self.lab = Department.objects.create(title='Laboratory', icon='🧪', category='Diagnostics')
        self.admin = User.objects.create_user(username='hospital_admin', password='P@ssw0rd1',
                                              variant='hospital', account_type='admin')
        self.nurse = User.objects.create_user(username='nurse1', password='P@ssw0rd1', variant='hospital',
                                              account_type='staff', department=self.reception)
        self.client = APIClient()
        self.client.force_authenticate(user=self.nurse)

    def test_reception_routes_a_patient_to_the_laboratory(self):
        response = APIClient().post('/api/hospital/ticket')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        ticket_id = response.data['id']

        response = self.client.get('/api/hospital/ticket', {'department': 'Reception'})
        self.assertEqual([t['id'] for t in response.data], [ticket_id])

        response = self.client.post(
            f'/api/hospital/ticket/{ticket_id}/next-step',
            {'departmentId': self.lab.id, 'currentDepartment': 'Reception', 'userType': 'Insurance',
             'patientName': 'Nakato'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        history = response.data['ticket']['departmentHistory']
        self.assertEqual([(h['department'], h['completed']) for h in history],
                         [('Reception', True), ('Laboratory', False)])

        response = self.client.get('/api/hospital/ticket', {'department': 'Laboratory'})
        self.assertEqual([t['id'] for t in response.data], [ticket_id])

        response = self.client.post(f'/api/hospital/ticket/{ticket_id}/clear',
                                    {'currentDepartment': 'Laboratory'}, format='json')
        self.assertTrue(response.data['ticket']['completed'])
        response = self.client.get('/api/hospital/ticket/completed')
        self.assertEqual([t['id'] for t in response.data], [ticket_id])

    def test_routing_requires_the_current_department(self):
        ticket_id = APIClient().post('/api/hospital/ticket').data['id']
        response = self.client.post(f'/api/hospital/ticket/{ticket_id}/next-step',
                                    {'departmentId': self.lab.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['ok'])
        history = self.client.get(f'/api/hospital/ticket/{ticket_id}').data['departmentHistory']
        self.assertEqual([h['department'] for h in history], ['Reception'])

    def test_cash_patient_listed_after_payment(self):
        ticket_id = APIClient().post('/api/hospital/ticket').data['id']
        self.client.post(f'/api/hospital/ticket/{ticket_id}/next-step',
                         {'departmentId': self.lab.id, 'currentDepartment': 'Reception', 'userType': 'Cash'},
                         format='json')
        self.assertEqual(self.client.get('/api/hospital/ticket', {'department': 'Laboratory'}).data, [])
        response = self.client.post(f'/api/hospital/ticket/{ticket_id}/clear-payment',
                                    {'department': 'Laboratory'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        listed = self.client.get('/api/hospital/ticket', {'department': 'Laboratory'}).data
        self.assertEqual([t['id'] for t in listed], [ticket_id])

    def test_hold_and_call_flags(self):
        ticket_id = APIClient().post('/api/hospital/ticket').data['id']
        url = f'/api/hospital/ticket/{ticket_id}'
        response = self.client.put(url, {'held': True, 'currentDepartment': 'Reception'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['held'])
        self.assertIsNotNone(response.data['departmentHistory'][0]['holdStartedAt'])
        response = self.client.put(url, {'call': True}, format='json')
        self.assertTrue(HospitalTicket.objects.get(pk=ticket_id).call)
        response = self.client.put(url, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_serving_staff_take_a_room(self):
        response = self.client.post('/api/hospital/room', {'departmentId': self.lab.id, 'roomNumber': '2'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        room_id = response.data['room']['id']
        self.assertEqual(self.client.get('/api/hospital/room').data['room']['id'], room_id)
        response = self.client.get(f'/api/hospital/staff/{self.nurse.id}/active-room')
        self.assertEqual(response.data['department']['title'], 'Laboratory')

    def test_departments_enabled_from_catalogue(self):
        admin = APIClient()
        admin.force_authenticate(user=self.admin)
        response = admin.post('/api/hospital/department', {'title': 'Pharmacy'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['icon'], '💊')
        response = admin.post('/api/hospital/department', {'title': 'Pharmacy'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        response = admin.get('/api/hospital/department/catalogue')
        enabled = {d['title'] for d in response.data if d['enabled']}
        self.assertEqual(enabled, {'Reception', 'Laboratory', 'Pharmacy'})

    def test_room_actions_on_department(self):
        admin = APIClient()
        admin.force_authenticate(user=self.admin)
        url = f'/api/hospital/department/{self.lab.id}'
        response = admin.patch(url, {'action': 'addRoom', 'roomNumber': '7', 'staffId': self.nurse.id},
                               format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        room = response.data['rooms'][0]
        self.assertEqual((room['roomNumber'], room['staffId']), ('7', self.nurse.id))
        response = admin.patch(url, {'action': 'addRoom', 'roomNumber': '7'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        response = admin.patch(url, {'action': 'deleteRoom', 'roomId': room['id']}, format='json')
        self.assertEqual(response.data['rooms'], [])

    def test_bank_accounts_are_kept_out(self):
        teller = User.objects.create_user(username='teller1', password='P@ssw0rd1', variant='bank')
        client = APIClient()
        client.force_authenticate(user=teller)
        self.assertEqual(client.get('/api/hospital/dashboard').status_code, status.HTTP_403_FORBIDDEN)

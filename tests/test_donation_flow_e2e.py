"""
End-to-end donation flows: hospital request, blood bank request, and a
volunteer responding and booking an appointment.
"""
from datetime import timedelta

import pytest
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.appointments.models import Appointment
from apps.emergencies.models import EmergencyPost, Participation


@pytest.mark.django_db
class TestHospitalRequestFindsBankStock:

    def test_request_stops_at_availability_found(self, signed_in):
        bank = signed_in('ops@bank.org', 'blood_bank',
                         organization_name='Springfield Blood Bank', phone='555-0199')
        hospital = signed_in('ops@hospital.org', 'hospital',
                             organization_name='Springfield General', phone='555-0100')

        stocked = bank.post('/api/v1/inventory/items/', {
            'city': 'Springfield', 'blood_group': 'O-', 'quantity': 5,
        }, format='json')
        assert stocked.status_code == 201

        response = hospital.post('/api/v1/emergencies/posts/submit/', {
            'blood_group': 'O-',
            'quantity': 2,
            'location': 'Springfield General, Ward 3',
            'contact_phone': '555-0100',
            'urgency_level': 'critical',
        }, format='json')

        assert response.status_code == 200
        assert response.data['state'] == 'availability_found'
        assert len(response.data['matches']) == 1
        match = response.data['matches'][0]
        assert match['city'] == 'Springfield'
        assert match['quantity'] == 5
        assert match['blood_bank_name'] == 'Springfield Blood Bank'
        assert not EmergencyPost.objects.exists()


@pytest.mark.django_db
class TestBloodBankRequestPostsDirectly:

    def test_request_posted_as_active(self, signed_in):
        bank = signed_in('ops@bank.org', 'blood_bank', organization_name='Capital Blood Bank')

        response = bank.post('/api/v1/emergencies/posts/submit/', {
            'blood_group': 'AB-',
            'quantity': 1,
            'location': 'Capital Blood Bank',
            'contact_phone': '555-0300',
        }, format='json')

        assert response.status_code == 201
        assert response.data['state'] == 'posted'
        post = EmergencyPost.objects.get()
        assert post.status == 'active'
        assert post.blood_group == 'AB-'
        assert str(post.posted_by_id) == bank.user_id


@pytest.mark.django_db
class TestVolunteerRespondsAndBooks:

    def test_participation_then_appointment(self, signed_in):
        hospital = signed_in('ops@hospital.org', 'hospital', organization_name='Springfield General')
        volunteer = signed_in('donor@example.com', 'volunteer', full_name='Sam Donor')

        posted = hospital.post('/api/v1/emergencies/posts/submit/', {
            'blood_group': 'A+',
            'quantity': 3,
            'location': 'Springfield General',
            'contact_phone': '555-0100',
        }, format='json')
        assert posted.status_code == 201
        post_id = posted.data['post']['id']

        completed = volunteer.post('/api/v1/accounts/me/complete/', {
            'full_name': 'Sam Donor',
            'age': 31,
            'gender': 'other',
            'weight': '70.0',
            'city': 'Springfield',
            'phone': '555-0150',
            'blood_type': 'A+',
        }, format='json')
        assert completed.status_code == 200

        participated = volunteer.post(
            f'/api/v1/emergencies/posts/{post_id}/participate/',
            {'message': 'On my way'},
            format='json'
        )
        assert participated.status_code == 201

        hospitals = volunteer.get('/api/v1/accounts/hospitals/', {'emergency_post': post_id})
        assert hospitals.data[0]['id'] == hospital.user_id

        appointment_date = (timezone.now() + timedelta(days=2)).replace(microsecond=0)
        booked = volunteer.post('/api/v1/appointments/', {
            'hospital': hospital.user_id,
            'emergency_post': post_id,
            'appointment_date': appointment_date.isoformat(),
        }, format='json')
        assert booked.status_code == 201

        participation = Participation.objects.get()
        appointment = Appointment.objects.get()
        assert participation.status == 'pending'
        assert participation.volunteer_name == 'Sam Donor'
        assert appointment.status == 'pending'
        assert str(appointment.hospital_id) == hospital.user_id
        assert appointment.appointment_date == appointment_date
        assert appointment.volunteer_id == participation.volunteer_id
        assert str(appointment.emergency_post_id) == post_id
        assert parse_datetime(booked.data['appointment_date']) == appointment_date

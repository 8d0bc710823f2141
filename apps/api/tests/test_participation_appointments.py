"""
Volunteer participation and the donation appointments that may follow it.
"""
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.utils import timezone
from rest_framework import status

from apps.accounts.models import RoleChoices
from apps.appointments.models import Appointment, AppointmentStatusChoices
from apps.appointments.services import AppointmentError, book_appointment, transition_status
from apps.emergencies.models import (
    EmergencyPostStatusChoices,
    Participation,
    ParticipationStatusChoices,
)
from apps.emergencies.services import ParticipationError, record_participation


POSTS_URL = '/api/v1/emergencies/posts/'
PARTICIPATIONS_URL = '/api/v1/emergencies/participations/'
APPOINTMENTS_URL = '/api/v1/appointments/'
HOSPITALS_URL = '/api/v1/accounts/hospitals/'


@pytest.mark.django_db
class TestParticipate:

    def test_snapshot_filled_from_profile(self, volunteer_client, volunteer_user, hospital_user, make_post):
        post = make_post(hospital_user)

        response = volunteer_client.post(f'{POSTS_URL}{post.id}/participate/', {}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == ParticipationStatusChoices.PENDING
        assert response.data['volunteer_name'] == 'Alex Donor'
        assert response.data['contact_number'] == '555-0142'
        assert response.data['age'] == 29
        assert response.data['city'] == 'Springfield'
        assert response.data['previous_donation'] is True

    def test_sent_values_override_profile(self, volunteer_client, hospital_user, make_post):
        post = make_post(hospital_user)

        response = volunteer_client.post(
            f'{POSTS_URL}{post.id}/participate/',
            {'contact_number': '555-0999', 'message': 'Can come within the hour'},
            format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['contact_number'] == '555-0999'
        assert response.data['message'] == 'Can come within the hour'
        assert response.data['volunteer_name'] == 'Alex Donor'

    def test_incomplete_profile_rejected(self, client_for, incomplete_volunteer_user, hospital_user, make_post):
        post = make_post(hospital_user)

        response = client_for(incomplete_volunteer_user).post(
            f'{POSTS_URL}{post.id}/participate/', {}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error_type'] == 'profile_incomplete'
        assert not Participation.objects.exists()

    def test_closed_post_rejected(self, volunteer_client, hospital_user, make_post):
        post = make_post(hospital_user, status=EmergencyPostStatusChoices.FULFILLED)

        response = volunteer_client.post(f'{POSTS_URL}{post.id}/participate/', {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error_type'] == 'participation'

    def test_poster_cannot_participate(self, hospital_client, blood_bank_user, make_post):
        post = make_post(blood_bank_user)

        response = hospital_client.post(f'{POSTS_URL}{post.id}/participate/', {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_service_rejects_non_volunteer(self, hospital_user, blood_bank_user, make_post):
        post = make_post(blood_bank_user)

        with pytest.raises(ParticipationError):
            record_participation(post, hospital_user)

    def test_participation_does_not_book_appointment(self, volunteer_user, hospital_user, make_post):
        post = make_post(hospital_user)

        record_participation(post, volunteer_user)

        assert not Appointment.objects.exists()

    def test_participation_logged(self, volunteer_user, hospital_user, make_post):
        post = make_post(hospital_user)

        with patch('apps.emergencies.services.log_participation_recorded') as mock_log:
            participation = record_participation(post, volunteer_user)

        mock_log.assert_called_once_with(participation)


@pytest.mark.django_db
class TestReviewParticipation:

    def test_poster_sees_responses(self, hospital_client, hospital_user, volunteer_user, make_post):
        post = make_post(hospital_user)
        record_participation(post, volunteer_user)

        response = hospital_client.get(f'{POSTS_URL}{post.id}/participations/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['volunteer_name'] == 'Alex Donor'

    def test_poster_accepts(self, hospital_client, hospital_user, volunteer_user, make_post):
        participation = record_participation(make_post(hospital_user), volunteer_user)

        response = hospital_client.post(
            f'{PARTICIPATIONS_URL}{participation.id}/review/', {'decision': 'accepted'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == ParticipationStatusChoices.ACCEPTED

    def test_second_review_rejected(self, hospital_client, hospital_user, volunteer_user, make_post):
        participation = record_participation(make_post(hospital_user), volunteer_user)
        url = f'{PARTICIPATIONS_URL}{participation.id}/review/'
        hospital_client.post(url, {'decision': 'declined'}, format='json')

        response = hospital_client.post(url, {'decision': 'accepted'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error_type'] == 'participation'

    def test_other_poster_cannot_see_participation(self, blood_bank_client, hospital_user, volunteer_user, make_post):
        participation = record_participation(make_post(hospital_user), volunteer_user)

        response = blood_bank_client.post(
            f'{PARTICIPATIONS_URL}{participation.id}/review/', {'decision': 'accepted'}, format='json'
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_volunteer_lists_own_participations(self, volunteer_client, hospital_user, volunteer_user, make_post):
        record_participation(make_post(hospital_user), volunteer_user)

        response = volunteer_client.get(PARTICIPATIONS_URL)

        assert response.data['count'] == 1


@pytest.mark.django_db
class TestHospitalDirectory:

    def test_all_hospitals_listed_with_poster_first(self, volunteer_client, make_user, make_post):
        make_user(RoleChoices.HOSPITAL, organization_name='Alpha Clinic')
        poster = make_user(RoleChoices.HOSPITAL, organization_name='Zeta Hospital')
        post = make_post(poster)

        response = volunteer_client.get(HOSPITALS_URL, {'emergency_post': str(post.id)})

        assert response.status_code == status.HTTP_200_OK
        assert [h['organization_name'] for h in response.data] == ['Zeta Hospital', 'Alpha Clinic']

    def test_blood_bank_poster_does_not_narrow_list(self, volunteer_client, hospital_user, blood_bank_user, make_post):
        post = make_post(blood_bank_user)

        response = volunteer_client.get(HOSPITALS_URL, {'emergency_post': str(post.id)})

        assert [h['id'] for h in response.data] == [str(hospital_user.id)]

    def test_without_post_ordered_by_name(self, volunteer_client, make_user):
        make_user(RoleChoices.HOSPITAL, organization_name='Beta General')
        make_user(RoleChoices.HOSPITAL, organization_name='Alpha Clinic')

        response = volunteer_client.get(HOSPITALS_URL)

        assert [h['organization_name'] for h in response.data] == ['Alpha Clinic', 'Beta General']


@pytest.mark.django_db
class TestBookAppointment:

    def test_volunteer_books_pending_appointment(self, volunteer_client, volunteer_user, hospital_user, make_post, tomorrow):
        post = make_post(hospital_user)

        response = volunteer_client.post(APPOINTMENTS_URL, {
            'hospital': str(hospital_user.id),
            'emergency_post': str(post.id),
            'appointment_date': tomorrow.isoformat(),
            'notes': 'Mornings work best',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == AppointmentStatusChoices.PENDING
        assert response.data['hospital_name'] == 'Springfield General'
        appointment = Appointment.objects.get()
        assert appointment.volunteer == volunteer_user
        assert appointment.emergency_post == post

    def test_past_date_rejected(self, volunteer_client, hospital_user):
        yesterday = timezone.now() - timedelta(days=1)

        response = volunteer_client.post(APPOINTMENTS_URL, {
            'hospital': str(hospital_user.id),
            'appointment_date': yesterday.isoformat(),
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Appointment date cannot be in the past'
        assert not Appointment.objects.exists()

    def test_booking_with_blood_bank_rejected(self, volunteer_user, blood_bank_user, tomorrow):
        with pytest.raises(AppointmentError):
            book_appointment(volunteer_user, blood_bank_user, tomorrow)

    def test_hospital_cannot_book(self, hospital_client, hospital_user, tomorrow):
        response = hospital_client.post(APPOINTMENTS_URL, {
            'hospital': str(hospital_user.id),
            'appointment_date': tomorrow.isoformat(),
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_both_parties_see_appointment(self, client_for, volunteer_user, hospital_user, blood_bank_user, tomorrow):
        book_appointment(volunteer_user, hospital_user, tomorrow)

        assert client_for(volunteer_user).get(APPOINTMENTS_URL).data['count'] == 1
        assert client_for(hospital_user).get(APPOINTMENTS_URL).data['count'] == 1
        assert client_for(blood_bank_user).get(APPOINTMENTS_URL).data['count'] == 0


@pytest.mark.django_db
class TestAppointmentTransitions:

    @pytest.fixture
    def appointment(self, volunteer_user, hospital_user, tomorrow):
        return book_appointment(volunteer_user, hospital_user, tomorrow)

    def test_hospital_confirms_then_completes(self, hospital_client, appointment):
        url = f'{APPOINTMENTS_URL}{appointment.id}/transition/'

        confirmed = hospital_client.post(url, {'status': 'confirmed'}, format='json')
        completed = hospital_client.post(url, {'status': 'completed'}, format='json')

        assert confirmed.status_code == status.HTTP_200_OK
        assert completed.status_code == status.HTTP_200_OK
        assert completed.data['status'] == AppointmentStatusChoices.COMPLETED

    def test_pending_cannot_complete(self, hospital_user, appointment):
        with pytest.raises(AppointmentError, match='Transition not allowed'):
            transition_status(appointment, AppointmentStatusChoices.COMPLETED, hospital_user)

    def test_volunteer_cancels_with_reason(self, volunteer_client, appointment):
        response = volunteer_client.post(
            f'{APPOINTMENTS_URL}{appointment.id}/transition/',
            {'status': 'cancelled', 'reason': 'Feeling unwell'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == AppointmentStatusChoices.CANCELLED
        assert response.data['cancellation_reason'] == 'Feeling unwell'

    def test_volunteer_cannot_confirm(self, volunteer_client, appointment):
        response = volunteer_client.post(
            f'{APPOINTMENTS_URL}{appointment.id}/transition/', {'status': 'confirmed'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error_type'] == 'appointment'
        appointment.refresh_from_db()
        assert appointment.status == AppointmentStatusChoices.PENDING

    def test_terminal_status_cannot_change(self, hospital_user, appointment):
        transition_status(appointment, AppointmentStatusChoices.CANCELLED, hospital_user)

        with patch('apps.appointments.services.log_appointment_transition') as mock_log:
            with pytest.raises(AppointmentError, match='terminal'):
                transition_status(appointment, AppointmentStatusChoices.CONFIRMED, hospital_user)

        assert mock_log.call_args[1]['result'] == 'blocked'

    def test_outsider_cannot_see_appointment(self, client_for, make_user, appointment):
        outsider = make_user(RoleChoices.HOSPITAL, organization_name='Other Hospital')

        response = client_for(outsider).post(
            f'{APPOINTMENTS_URL}{appointment.id}/transition/', {'status': 'confirmed'}, format='json'
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_post_deletion_keeps_appointment(self, volunteer_user, hospital_user, make_post, tomorrow):
        post = make_post(hospital_user)
        appointment = book_appointment(volunteer_user, hospital_user, tomorrow, emergency_post=post)

        post.delete()

        appointment.refresh_from_db()
        assert appointment.emergency_post is None

"""
Emergency post API tests: the submit workflow, listing, and closing posts.
"""
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from rest_framework import status

from apps.emergencies.models import EmergencyPost, EmergencyPostStatusChoices
from apps.emergencies.services import submit_emergency_request
from apps.emergencies.workflow import (
    HospitalPostRequest,
    WorkflowError,
    WorkflowStateChoices,
)


POSTS_URL = '/api/v1/emergencies/posts/'
SUBMIT_URL = f'{POSTS_URL}submit/'

REQUEST = {
    'blood_group': 'O-',
    'quantity': 2,
    'location': 'Springfield General',
    'contact_phone': '555-0100',
    'urgency_level': 'critical',
}


@pytest.mark.django_db
class TestSubmitAsHospital:
    """Hospitals are shown blood bank stock before anything is posted."""

    def test_stock_available_stops_before_posting(self, hospital_client, blood_bank_user, make_inventory):
        make_inventory(blood_bank_user, 'O-', 5)

        response = hospital_client.post(SUBMIT_URL, REQUEST, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['state'] == WorkflowStateChoices.AVAILABILITY_FOUND
        assert len(response.data['matches']) == 1
        assert response.data['matches'][0]['blood_bank_name'] == 'Springfield Blood Bank'
        assert 'post' not in response.data
        assert not EmergencyPost.objects.exists()

    def test_post_anyway_creates_post(self, hospital_client, hospital_user, blood_bank_user, make_inventory):
        make_inventory(blood_bank_user, 'O-', 5)

        response = hospital_client.post(SUBMIT_URL, {**REQUEST, 'post_anyway': True}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['state'] == WorkflowStateChoices.POSTED
        assert len(response.data['matches']) == 1
        post = EmergencyPost.objects.get()
        assert post.posted_by == hospital_user
        assert post.status == EmergencyPostStatusChoices.ACTIVE
        assert response.data['post']['id'] == str(post.id)
        assert response.data['post']['poster_name'] == 'Springfield General'

    def test_contact_blood_banks_abandons(self, hospital_client, blood_bank_user, make_inventory):
        make_inventory(blood_bank_user, 'O-', 5)

        response = hospital_client.post(
            SUBMIT_URL, {**REQUEST, 'contact_blood_banks': True}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['state'] == WorkflowStateChoices.ABANDONED
        assert not EmergencyPost.objects.exists()

    def test_no_stock_posts_directly(self, hospital_client, blood_bank_user, make_inventory):
        make_inventory(blood_bank_user, 'O-', 1)

        response = hospital_client.post(SUBMIT_URL, REQUEST, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['state'] == WorkflowStateChoices.POSTED
        assert response.data['matches'] == []
        assert EmergencyPost.objects.count() == 1

    def test_both_decisions_rejected(self, hospital_client):
        response = hospital_client.post(
            SUBMIT_URL,
            {**REQUEST, 'post_anyway': True, 'contact_blood_banks': True},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error_type'] == 'validation'

    def test_store_failure_returns_503_and_leaves_no_post(self, hospital_client):
        with patch(
            'apps.emergencies.services.find_available_supply',
            side_effect=DatabaseError('could not connect to server')
        ):
            response = hospital_client.post(SUBMIT_URL, REQUEST, format='json')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data['error_type'] == 'data_store'
        assert response.data['error'] == 'could not connect to server'
        assert not EmergencyPost.objects.exists()

    def test_invalid_quantity_rejected(self, hospital_client):
        response = hospital_client.post(SUBMIT_URL, {**REQUEST, 'quantity': 0}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'quantity' in response.data['fields']

    def test_plain_create_runs_same_workflow(self, hospital_client):
        response = hospital_client.post(POSTS_URL, REQUEST, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['state'] == WorkflowStateChoices.POSTED


@pytest.mark.django_db
class TestSubmitAsOtherRoles:

    def test_blood_bank_posts_without_check(self, blood_bank_client, blood_bank_user, make_inventory):
        make_inventory(blood_bank_user, 'O-', 50)

        with patch('apps.emergencies.services.find_available_supply') as mock_find:
            response = blood_bank_client.post(SUBMIT_URL, REQUEST, format='json')

        mock_find.assert_not_called()
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['state'] == WorkflowStateChoices.POSTED
        assert response.data['post']['poster_role'] == 'blood_bank'

    def test_volunteer_forbidden(self, volunteer_client):
        response = volunteer_client.post(SUBMIT_URL, REQUEST, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not EmergencyPost.objects.exists()

    def test_mismatched_poster_role_rejected(self, hospital_client):
        response = hospital_client.post(
            SUBMIT_URL, {**REQUEST, 'poster_role': 'blood_bank'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'poster_role' in response.data['fields']

    def test_service_rejects_role_the_poster_lacks(self, blood_bank_user):
        with pytest.raises(WorkflowError):
            submit_emergency_request(blood_bank_user, HospitalPostRequest(**{
                k: v for k, v in REQUEST.items() if k != 'urgency_level'
            }))


@pytest.mark.django_db
class TestPostListing:

    def test_list_shows_active_posts_by_default(self, volunteer_client, hospital_user, make_post):
        active = make_post(hospital_user)
        make_post(hospital_user, status=EmergencyPostStatusChoices.CLOSED)

        response = volunteer_client.get(POSTS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert [row['id'] for row in response.data['results']] == [str(active.id)]

    def test_status_all_includes_closed(self, volunteer_client, hospital_user, make_post):
        make_post(hospital_user)
        make_post(hospital_user, status=EmergencyPostStatusChoices.FULFILLED)

        response = volunteer_client.get(POSTS_URL, {'status': 'all'})

        assert response.data['count'] == 2

    def test_mine_filters_to_caller(self, hospital_client, hospital_user, blood_bank_user, make_post):
        mine = make_post(hospital_user)
        make_post(blood_bank_user)

        response = hospital_client.get(POSTS_URL, {'mine': 'true'})

        assert [row['id'] for row in response.data['results']] == [str(mine.id)]

    def test_blood_group_filter(self, volunteer_client, hospital_user, make_post):
        make_post(hospital_user, blood_group='A+')
        wanted = make_post(hospital_user, blood_group='B-')

        response = volunteer_client.get(POSTS_URL, {'blood_group': 'B-'})

        assert [row['id'] for row in response.data['results']] == [str(wanted.id)]


@pytest.mark.django_db
class TestClosingPosts:

    def test_owner_marks_post_fulfilled(self, hospital_client, hospital_user, make_post):
        post = make_post(hospital_user)

        response = hospital_client.post(f'{POSTS_URL}{post.id}/close/', {'status': 'fulfilled'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == EmergencyPostStatusChoices.FULFILLED

    def test_closing_twice_rejected(self, hospital_client, hospital_user, make_post):
        post = make_post(hospital_user, status=EmergencyPostStatusChoices.CLOSED)

        response = hospital_client.post(f'{POSTS_URL}{post.id}/close/', {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error_type'] == 'emergency_post'

    def test_other_poster_cannot_close(self, blood_bank_client, hospital_user, make_post):
        post = make_post(hospital_user)

        response = blood_bank_client.post(f'{POSTS_URL}{post.id}/close/', {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        post.refresh_from_db()
        assert post.is_active

    def test_owner_deletes_post(self, hospital_client, hospital_user, make_post):
        post = make_post(hospital_user)

        response = hospital_client.delete(f'{POSTS_URL}{post.id}/')

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not EmergencyPost.objects.exists()

    def test_other_poster_cannot_delete(self, blood_bank_client, hospital_user, make_post):
        post = make_post(hospital_user)

        response = blood_bank_client.delete(f'{POSTS_URL}{post.id}/')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert EmergencyPost.objects.filter(pk=post.pk).exists()

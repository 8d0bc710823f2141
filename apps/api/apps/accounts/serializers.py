"""
Accounts serializers: sign-up, profiles, hospital directory.
"""
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from apps.accounts.models import POSTER_ROLES, Profile, RoleChoices


class SignUpSerializer(serializers.Serializer):
    """
    POST /api/v1/accounts/signup/

    Hospitals and blood banks must send organization_name.
    """
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})
    full_name = serializers.CharField(max_length=255)
    role = serializers.ChoiceField(choices=RoleChoices.choices)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    organization_name = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_password(self, value):
        validate_password(value)
        return value

    def validate(self, attrs):
        if attrs['role'] in POSTER_ROLES and not attrs.get('organization_name', '').strip():
            raise serializers.ValidationError({
                'organization_name': 'This field is required for hospitals and blood banks.'
            })
        return attrs


class ProfileSerializer(serializers.ModelSerializer):
    """Own profile (GET/PATCH /api/v1/accounts/me/)."""
    id = serializers.UUIDField(source='user_id', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)

    class Meta:
        model = Profile
        fields = [
            'id',
            'email',
            'role',
            'full_name',
            'phone',
            'organization_name',
            'age',
            'gender',
            'weight',
            'blood_type',
            'smoking_habit',
            'drinking_habit',
            'job_description',
            'type_of_work',
            'stress_level',
            'blood_sugar_level',
            'major_diseases_history',
            'previous_donation',
            'city',
            'location',
            'profile_picture_url',
            'profile_completed',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'email', 'role', 'profile_completed', 'created_at', 'updated_at']


class CompleteProfileSerializer(serializers.ModelSerializer):
    """
    POST /api/v1/accounts/me/complete/

    Donor details a volunteer gives once before responding to posts.
    """
    full_name = serializers.CharField(max_length=255)
    age = serializers.IntegerField(min_value=16, max_value=100)
    gender = serializers.ChoiceField(choices=Profile._meta.get_field('gender').choices)
    weight = serializers.DecimalField(max_digits=5, decimal_places=1, min_value=30)
    city = serializers.CharField(max_length=120)
    phone = serializers.CharField(max_length=30)
    blood_type = serializers.ChoiceField(choices=Profile._meta.get_field('blood_type').choices)

    class Meta:
        model = Profile
        fields = [
            'full_name',
            'age',
            'gender',
            'weight',
            'city',
            'phone',
            'blood_type',
            'smoking_habit',
            'drinking_habit',
            'job_description',
            'type_of_work',
            'stress_level',
            'blood_sugar_level',
            'major_diseases_history',
            'previous_donation',
            'location',
            'profile_picture_url',
        ]


class HospitalSerializer(serializers.ModelSerializer):
    """Hospital directory entry for appointment booking."""
    id = serializers.UUIDField(source='user_id', read_only=True)

    class Meta:
        model = Profile
        fields = ['id', 'organization_name', 'full_name', 'phone', 'city', 'location']
        read_only_fields = fields

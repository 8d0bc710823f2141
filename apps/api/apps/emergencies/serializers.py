"""
Emergency serializers: post requests (tagged per poster role), posts,
participations.
"""
from rest_framework import serializers

from apps.accounts.models import POSTER_ROLES
from apps.core.blood_groups import BloodGroupChoices

from .models import (
    EmergencyPost,
    EmergencyPostStatusChoices,
    Participation,
    ParticipationStatusChoices,
    UrgencyLevelChoices,
)
from .workflow import build_post_request


class EmergencyRequestSerializer(serializers.Serializer):
    """
    POST /api/v1/emergencies/posts/submit/

    `poster_role` tags the request; it defaults to the caller's role and
    must match it when given.
    """
    poster_role = serializers.ChoiceField(
        choices=[(role.value, role.label) for role in POSTER_ROLES],
        required=False
    )
    blood_group = serializers.ChoiceField(choices=BloodGroupChoices.choices)
    quantity = serializers.IntegerField(min_value=1)
    location = serializers.CharField(max_length=255)
    contact_phone = serializers.CharField(max_length=30)
    urgency_level = serializers.ChoiceField(
        choices=UrgencyLevelChoices.choices,
        default=UrgencyLevelChoices.HIGH
    )
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    post_anyway = serializers.BooleanField(default=False)
    contact_blood_banks = serializers.BooleanField(default=False)

    def validate(self, attrs):
        caller_roles = self.context['caller_roles']
        poster_role = attrs.get('poster_role')

        if poster_role is None:
            candidates = caller_roles & POSTER_ROLES
            if len(candidates) != 1:
                raise serializers.ValidationError({
                    'poster_role': 'Only hospitals and blood banks can post emergency requests.'
                })
            poster_role = next(iter(candidates))
        elif poster_role not in caller_roles:
            raise serializers.ValidationError({
                'poster_role': f'You do not hold the {poster_role} role.'
            })

        if attrs['post_anyway'] and attrs['contact_blood_banks']:
            raise serializers.ValidationError(
                'Choose either post_anyway or contact_blood_banks, not both.'
            )

        attrs['poster_role'] = poster_role
        return attrs

    def to_post_request(self):
        data = self.validated_data
        return build_post_request(
            data['poster_role'],
            blood_group=data['blood_group'],
            quantity=data['quantity'],
            location=data['location'],
            contact_phone=data['contact_phone'],
            urgency_level=data['urgency_level'],
            description=data.get('description') or None,
        )


class EmergencyPostSerializer(serializers.ModelSerializer):
    poster_name = serializers.SerializerMethodField()
    poster_role = serializers.CharField(source='posted_by.profile.role', read_only=True, default=None)
    participation_count = serializers.IntegerField(read_only=True, default=None)

    class Meta:
        model = EmergencyPost
        fields = [
            'id',
            'posted_by',
            'poster_name',
            'poster_role',
            'blood_group',
            'quantity',
            'location',
            'urgency_level',
            'description',
            'contact_phone',
            'status',
            'participation_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_poster_name(self, obj):
        profile = getattr(obj.posted_by, 'profile', None)
        return profile.display_name if profile else None


class ClosePostSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[
            EmergencyPostStatusChoices.FULFILLED,
            EmergencyPostStatusChoices.CLOSED,
        ],
        default=EmergencyPostStatusChoices.CLOSED
    )


class ParticipateSerializer(serializers.Serializer):
    """
    POST /api/v1/emergencies/posts/{id}/participate/

    Every field is optional; omitted ones are taken from the profile.
    """
    volunteer_name = serializers.CharField(max_length=255, required=False)
    age = serializers.IntegerField(min_value=16, max_value=100, required=False)
    gender = serializers.CharField(max_length=10, required=False)
    weight = serializers.DecimalField(max_digits=5, decimal_places=1, required=False)
    city = serializers.CharField(max_length=120, required=False)
    contact_number = serializers.CharField(max_length=30, required=False)
    blood_sugar_level = serializers.CharField(max_length=50, required=False)
    stress_level = serializers.CharField(max_length=50, required=False)
    type_of_work = serializers.CharField(max_length=100, required=False)
    major_diseases_history = serializers.CharField(required=False, allow_blank=True)
    previous_donation = serializers.BooleanField(required=False, allow_null=True)
    message = serializers.CharField(required=False, allow_blank=True)


class ParticipationSerializer(serializers.ModelSerializer):
    emergency_blood_group = serializers.CharField(source='emergency.blood_group', read_only=True)
    emergency_location = serializers.CharField(source='emergency.location', read_only=True)

    class Meta:
        model = Participation
        fields = [
            'id',
            'emergency',
            'emergency_blood_group',
            'emergency_location',
            'volunteer',
            'volunteer_name',
            'age',
            'gender',
            'weight',
            'city',
            'contact_number',
            'blood_sugar_level',
            'stress_level',
            'type_of_work',
            'major_diseases_history',
            'previous_donation',
            'message',
            'status',
            'created_at',
        ]
        read_only_fields = fields


class ReviewParticipationSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=[
        ParticipationStatusChoices.ACCEPTED,
        ParticipationStatusChoices.DECLINED,
    ])

from rest_framework import serializers
from .models import Company, Contact, Prospect, ActivityLog, Note, SupportTicket


class ContactSerializer(serializers.ModelSerializer):
    company_name = serializers.CharField(source='company.name', read_only=True)

    class Meta:
        model = Contact
        fields = ['id', 'company', 'company_name', 'name', 'email', 'phone', 'role_title', 'is_primary',
                  'owner', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class CompanySerializer(serializers.ModelSerializer):
    owner_name = serializers.CharField(source='owner.username', read_only=True)
    primary_contact_name = serializers.CharField(source='primary_contact.name', read_only=True)

    class Meta:
        model = Company
        fields = ['id', 'name', 'short_name', 'rfc', 'industry', 'stage', 'priority', 'owner', 'owner_name',
                  'website', 'phone', 'email', 'products_of_interest', 'primary_contact', 'primary_contact_name',
                  'delivery_addresses', 'profile', 'is_supplier_too', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_delivery_addresses(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Expected a list of addresses.")
        return value

    def validate(self, attrs):
        primary_contact = attrs.get('primary_contact')
        if primary_contact and self.instance and primary_contact.company_id not in (None, self.instance.id):
            raise serializers.ValidationError({'primary_contact': 'The contact belongs to another company.'})
        return attrs


class ProspectSerializer(serializers.ModelSerializer):
    owner_name = serializers.CharField(source='owner.username', read_only=True)
    company_name = serializers.CharField(source='company.name', read_only=True)

    class Meta:
        model = Prospect
        fields = ['id', 'name', 'company', 'company_name', 'stage', 'est_value', 'currency', 'priority',
                  'owner', 'owner_name', 'created_by', 'origin', 'industry', 'contact_name', 'email', 'phone',
                  'website', 'address', 'next_action', 'next_action_date', 'lost_reason', 'lost_notes',
                  'paused_reason', 'paused_until', 'notes', 'candidate', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'candidate', 'created_at', 'updated_at']

    def validate_est_value(self, value):
        if value < 0:
            raise serializers.ValidationError("Estimated value cannot be negative.")
        return value


class StageMoveSerializer(serializers.Serializer):
    stage = serializers.CharField()
    lost_reason = serializers.CharField(required=False, allow_blank=True)
    lost_notes = serializers.CharField(required=False, allow_blank=True)
    paused_reason = serializers.CharField(required=False, allow_blank=True)
    paused_until = serializers.DateField(required=False, allow_null=True)


class ActivityLogSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.username', read_only=True)
    type_display = serializers.CharField(source='get_type_display', read_only=True)

    class Meta:
        model = ActivityLog
        fields = ['id', 'type', 'type_display', 'description', 'user', 'user_name', 'company', 'prospect',
                  'contact', 'candidate', 'created_at']
        read_only_fields = ['user', 'created_at']

    def validate(self, attrs):
        if not any(attrs.get(field) for field in ('company', 'prospect', 'contact', 'candidate')):
            raise serializers.ValidationError("An activity must be linked to a company, prospect, contact or candidate.")
        return attrs


class NoteSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.username', read_only=True)

    class Meta:
        model = Note
        fields = ['id', 'entity_type', 'entity_id', 'text', 'user', 'user_name', 'created_at', 'updated_at']
        read_only_fields = ['user', 'created_at', 'updated_at']


class SupportTicketSerializer(serializers.ModelSerializer):
    company_name = serializers.CharField(source='company.name', read_only=True)

    class Meta:
        model = SupportTicket
        fields = ['id', 'company', 'company_name', 'subject', 'description', 'status', 'priority',
                  'assigned_to', 'created_by', 'created_at', 'updated_at', 'closed_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at', 'closed_at']

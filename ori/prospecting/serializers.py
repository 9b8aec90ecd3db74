from rest_framework import serializers
from .models import Brand, ImportSource, ImportHistory, Candidate


class BrandSerializer(serializers.ModelSerializer):
    candidate_count = serializers.SerializerMethodField()

    class Meta:
        model = Brand
        fields = ['id', 'name', 'description', 'website', 'candidate_count', 'created_at']
        read_only_fields = ['created_at']

    def get_candidate_count(self, obj):
        return obj.candidates.count()


class ImportSourceSerializer(serializers.ModelSerializer):
    class Meta:
        model = ImportSource
        fields = ['id', 'name', 'type', 'description', 'created_at']
        read_only_fields = ['created_at']


class ImportHistorySerializer(serializers.ModelSerializer):
    source_name = serializers.CharField(source='source.name', read_only=True)
    imported_by_name = serializers.CharField(source='imported_by.username', read_only=True)

    class Meta:
        model = ImportHistory
        fields = ['id', 'source', 'source_name', 'source_url', 'search_terms', 'location', 'criteria', 'status',
                  'total_processed', 'new_candidates', 'duplicates_skipped', 'error', 'imported_by',
                  'imported_by_name', 'created_at', 'finished_at']
        read_only_fields = fields


class CandidateSerializer(serializers.ModelSerializer):
    brand_name = serializers.CharField(source='brand.name', read_only=True)
    assigned_to_name = serializers.CharField(source='assigned_to.username', read_only=True)
    completeness = serializers.SerializerMethodField()

    class Meta:
        model = Candidate
        fields = ['id', 'name', 'google_place_id', 'description', 'address', 'city', 'state', 'phone', 'phones',
                  'email', 'emails', 'website', 'linkedins', 'facebooks', 'instagrams', 'twitters',
                  'google_maps_url', 'raw_categories', 'tags', 'average_rating', 'reviews_count', 'image_urls',
                  'opening_hours', 'lat', 'lng', 'status', 'rejection_reason', 'rejection_notes',
                  'blacklist_reason', 'blacklist_notes', 'brand', 'brand_name', 'assigned_to', 'assigned_to_name',
                  'ai_analysis', 'profile_views', 'import_history', 'imported_by', 'prospect', 'completeness',
                  'created_at', 'updated_at']
        read_only_fields = ['status', 'rejection_reason', 'rejection_notes', 'blacklist_reason', 'blacklist_notes',
                            'profile_views', 'import_history', 'imported_by', 'prospect', 'created_at',
                            'updated_at']

    def get_completeness(self, obj):
        return obj.get_completeness()

    def validate_google_place_id(self, value):
        return value or None


class CandidateMapPointSerializer(serializers.ModelSerializer):
    class Meta:
        model = Candidate
        fields = ['id', 'name', 'lat', 'lng', 'status', 'city', 'state', 'average_rating', 'brand']


class ImportRequestSerializer(serializers.Serializer):
    url = serializers.URLField(max_length=1000)
    source = serializers.PrimaryKeyRelatedField(queryset=ImportSource.objects.all(), required=False, allow_null=True)
    search_terms = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    location = serializers.CharField(required=False, allow_blank=True, default='')
    criteria = serializers.DictField(required=False, default=dict)
    import_duplicates = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    brand_associations = serializers.DictField(child=serializers.IntegerField(), required=False, default=dict)

    def validate_criteria(self, value):
        brand_id = value.get('brand')
        if brand_id and not Brand.objects.filter(pk=brand_id).exists():
            raise serializers.ValidationError(f"Marca {brand_id} no existe.")
        return value


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class CandidateStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=['pendiente', 'en_revision'])

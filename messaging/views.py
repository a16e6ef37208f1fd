"""
Views for messaging app API endpoints.

Implements direct messages and the content report workflow.
"""

from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from rest_framework import viewsets, status, filters
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view

from core.api_tags import APITags, rate_limited_schema

from .filters import ContentReportFilter
from .models import ContentReport
from .permissions import IsModerator
from .serializers import (
    ContentReportCreateSerializer,
    ContentReportReviewSerializer,
    ContentReportSerializer,
    ConversationSerializer,
    DirectMessageSerializer,
    ReportCountsSerializer,
    SendMessageSerializer,
)
from .services import MessageService, ReportService

User = get_user_model()


# =============================================================================
# DIRECT MESSAGES
# =============================================================================

@rate_limited_schema(
    APITags.MESSAGING,
    summary='Send direct message',
    description='Send a message. Fails if either user blocked the other, if the '
                'recipient\'s message privacy does not allow it, or if the sender '
                'is rate limited.',
    request=SendMessageSerializer,
    responses={201: DirectMessageSerializer}
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def send_message_view(request):
    serializer = SendMessageSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    recipient = get_object_or_404(User, id=serializer.validated_data['recipient_id'])
    message = MessageService.send_message(
        request.user,
        recipient,
        serializer.validated_data['content'],
        confirm_flagged=serializer.validated_data['confirm_flagged'],
    )
    return Response(DirectMessageSerializer(message).data, status=status.HTTP_201_CREATED)


@extend_schema(
    tags=[APITags.MESSAGING],
    summary='List conversations',
    description='One entry per conversation partner with the latest message and unread count.',
    responses={200: ConversationSerializer(many=True)}
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def conversations_view(request):
    conversations = MessageService.conversations(request.user)
    paginator = PageNumberPagination()
    page = paginator.paginate_queryset(conversations, request)
    return paginator.get_paginated_response(ConversationSerializer(page, many=True).data)


@extend_schema(
    tags=[APITags.MESSAGING],
    summary='Get conversation',
    description='Messages exchanged with another user, oldest first. Marks the '
                'messages received from them as read.',
    responses={200: DirectMessageSerializer(many=True)}
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def conversation_view(request, user_id):
    other = get_object_or_404(User, id=user_id)
    MessageService.mark_conversation_read(request.user, other)

    paginator = PageNumberPagination()
    page = paginator.paginate_queryset(MessageService.conversation(request.user, other), request)
    return paginator.get_paginated_response(DirectMessageSerializer(page, many=True).data)


@extend_schema(
    tags=[APITags.MESSAGING],
    summary='Mark message read',
    request=None,
    responses={200: DirectMessageSerializer}
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_read_view(request, message_id):
    message = MessageService.mark_read(request.user, message_id)
    return Response(DirectMessageSerializer(message).data)


# =============================================================================
# CONTENT REPORTS
# =============================================================================

@extend_schema_view(
    list=extend_schema(
        tags=[APITags.MODERATION],
        summary="List reports",
        description="Moderation dashboard. Filter by status, report_type and reason."
    ),
    retrieve=extend_schema(
        tags=[APITags.MODERATION],
        summary="Get report",
    ),
)
class ContentReportViewSet(viewsets.ModelViewSet):
    """
    ViewSet for content reports.

    Endpoints:
    - POST /reports/ - Report a user, testimony or message (any user)
    - GET /reports/ - List reports (staff)
    - GET /reports/{id}/ - Get report detail (staff)
    - POST /reports/{id}/review/ - Set the review status (staff)
    - GET /reports/counts/ - Number of reports per status (staff)
    """

    queryset = ContentReport.objects.select_related(
        'reporter', 'reporter__profile',
        'reported_user', 'reported_user__profile',
        'reviewed_by', 'reviewed_by__profile',
        'reported_testimony', 'reported_message',
    )
    serializer_class = ContentReportSerializer
    permission_classes = [IsAuthenticated, IsModerator]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = ContentReportFilter
    ordering_fields = ['created_at', 'updated_at']
    ordering = ['-created_at']
    lookup_value_regex = '[0-9a-fA-F-]{36}'
    # Note: http_method_names doesn't restrict custom @action methods
    http_method_names = ['get', 'post', 'head', 'options']

    @extend_schema(
        tags=[APITags.MODERATION],
        summary="Report content",
        description="Report a user, testimony or message. Each user can report "
                    "the same thing once.",
        request=ContentReportCreateSerializer,
        responses={201: ContentReportSerializer}
    )
    def create(self, request, *args, **kwargs):
        serializer = ContentReportCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        report = ReportService.create_report(
            request.user,
            report_type=serializer.validated_data['report_type'],
            target_id=serializer.validated_data['target_id'],
            reason=serializer.validated_data['reason'],
            details=serializer.validated_data['details'],
            request=request,
        )
        return Response(self.get_serializer(report).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=[APITags.MODERATION],
        summary="Review report",
        request=ContentReportReviewSerializer,
        responses={200: ContentReportSerializer}
    )
    @action(detail=True, methods=['post'])
    def review(self, request, pk=None):
        """
        Mark a report reviewed, resolved or dismissed.

        Request body:
        {
            "status": "reviewed" | "resolved" | "dismissed",
            "notes": "Optional notes about the decision"
        }
        """
        report = self.get_object()
        serializer = ContentReportReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        new_status = serializer.validated_data['status']
        ReportService.review(
            report,
            request.user,
            new_status,
            notes=serializer.validated_data.get('notes', ''),
        )

        response_serializer = self.get_serializer(report)
        return Response({
            'detail': f'Report {new_status}.',
            'report': response_serializer.data
        })

    @extend_schema(
        tags=[APITags.MODERATION],
        summary="Report counts",
        responses={200: ReportCountsSerializer}
    )
    @action(detail=False, methods=['get'])
    def counts(self, request):
        return Response(ReportService.counts())

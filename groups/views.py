"""
ViewSets for groups app API endpoints.
"""

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view

from core.api_tags import APITags, rate_limited_schema

from .serializers import (
    GroupMemberSerializer,
    GroupMessageSerializer,
    GroupSerializer,
    GroupWriteSerializer,
    PromoteMemberSerializer,
    SendGroupMessageSerializer,
)
from .services import GroupService


@extend_schema_view(
    list=extend_schema(
        tags=[APITags.GROUPS],
        summary="List groups",
        description="Public groups plus private groups the caller belongs to. "
                    "``mine=true`` keeps only the caller's groups; ``search`` "
                    "matches public groups by name or description.",
        parameters=[
            OpenApiParameter('search', str, description="Text to look for in public groups"),
            OpenApiParameter('mine', bool, description="Only groups the caller is a member of"),
        ],
    ),
    retrieve=extend_schema(
        tags=[APITags.GROUPS],
        summary="Get group",
    ),
    partial_update=extend_schema(
        tags=[APITags.GROUPS],
        summary="Update group",
        description="Leaders only.",
        request=GroupWriteSerializer,
    ),
    destroy=extend_schema(
        tags=[APITags.GROUPS],
        summary="Delete group",
        description="Leaders only.",
    ),
)
class GroupViewSet(viewsets.GenericViewSet):
    """
    ViewSet for fellowship groups.

    Endpoints:
    - GET/POST /groups/
    - GET/PATCH/DELETE /groups/{id}/
    - POST /groups/{id}/join/ - Join, or request to join a private group
    - POST /groups/{id}/leave/
    - GET /groups/{id}/members/
    - POST /groups/{id}/promote/ - Make a member a leader
    - GET /groups/{id}/requests/ - Pending join requests (leaders)
    - POST /groups/{id}/requests/{membership_id}/approve|deny/
    - GET/POST /groups/{id}/messages/
    - GET /groups/{id}/flagged/ - Flagged chat messages (leaders)
    """

    serializer_class = GroupSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = '[0-9a-fA-F-]{36}'
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        params = self.request.query_params
        if 'search' in params:
            return GroupService.search(params['search'])
        if params.get('mine') in ('true', '1'):
            return GroupService.user_groups(self.request.user)
        return GroupService.visible_to(self.request.user)

    def _paginated(self, queryset, serializer_class):
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(serializer_class(page, many=True).data)
        return Response(serializer_class(queryset, many=True).data)

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        return Response(self.get_serializer(queryset, many=True).data)

    @rate_limited_schema(
        APITags.GROUPS,
        summary="Create group",
        description="The creator becomes the group's first leader.",
        request=GroupWriteSerializer,
        responses={201: GroupSerializer}
    )
    def create(self, request, *args, **kwargs):
        serializer = GroupWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        group = GroupService.create_group(request.user, serializer.validated_data)
        group = GroupService.get_visible(group.pk, request.user)
        return Response(self.get_serializer(group).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        group = GroupService.get_visible(pk, request.user)
        return Response(self.get_serializer(group).data)

    def partial_update(self, request, pk=None):
        serializer = GroupWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        GroupService.update_group(request.user, pk, serializer.validated_data)
        group = GroupService.get_visible(pk, request.user)
        return Response(self.get_serializer(group).data)

    def destroy(self, request, pk=None):
        GroupService.delete_group(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=[APITags.GROUPS],
        summary="Join group",
        description="Public groups are joined at once. Private groups get a "
                    "pending request a leader approves or denies.",
        request=None,
        responses={201: GroupMemberSerializer}
    )
    @action(detail=True, methods=['post'])
    def join(self, request, pk=None):
        membership = GroupService.join(request.user, pk)
        return Response(GroupMemberSerializer(membership).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=[APITags.GROUPS],
        summary="Leave group",
        description="Also withdraws a pending request. The last leader of a "
                    "group with other members cannot leave.",
        request=None,
        responses={204: None}
    )
    @action(detail=True, methods=['post'])
    def leave(self, request, pk=None):
        GroupService.leave(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=[APITags.GROUPS],
        summary="List group members",
        responses={200: GroupMemberSerializer(many=True)}
    )
    @action(detail=True, methods=['get'])
    def members(self, request, pk=None):
        return self._paginated(GroupService.members(request.user, pk), GroupMemberSerializer)

    @extend_schema(
        tags=[APITags.GROUPS],
        summary="Promote member to leader",
        request=PromoteMemberSerializer,
        responses={200: GroupMemberSerializer}
    )
    @action(detail=True, methods=['post'])
    def promote(self, request, pk=None):
        serializer = PromoteMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        membership = GroupService.promote(request.user, pk, serializer.validated_data['user_id'])
        return Response(GroupMemberSerializer(membership).data)

    @extend_schema(
        tags=[APITags.GROUPS],
        summary="List join requests",
        description="Leaders only.",
        responses={200: GroupMemberSerializer(many=True)}
    )
    @action(detail=True, methods=['get'])
    def requests(self, request, pk=None):
        return self._paginated(GroupService.pending_requests(request.user, pk), GroupMemberSerializer)

    @extend_schema(
        tags=[APITags.GROUPS],
        summary="Approve join request",
        request=None,
        responses={200: GroupMemberSerializer}
    )
    @action(detail=True, methods=['post'],
            url_path=r'requests/(?P<membership_id>[0-9a-fA-F-]{36})/approve')
    def approve_request(self, request, pk=None, membership_id=None):
        membership = GroupService.approve_request(request.user, pk, membership_id)
        return Response(GroupMemberSerializer(membership).data)

    @extend_schema(
        tags=[APITags.GROUPS],
        summary="Deny join request",
        request=None,
        responses={204: None}
    )
    @action(detail=True, methods=['post'],
            url_path=r'requests/(?P<membership_id>[0-9a-fA-F-]{36})/deny')
    def deny_request(self, request, pk=None, membership_id=None):
        GroupService.deny_request(request.user, pk, membership_id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @rate_limited_schema(
        APITags.GROUPS,
        summary="Read or post group messages",
        description="Members only. Threatening or hateful messages are refused; "
                    "messages that may be inappropriate need ``confirm_flagged``.",
        request=SendGroupMessageSerializer,
        responses={200: GroupMessageSerializer(many=True), 201: GroupMessageSerializer}
    )
    @action(detail=True, methods=['get', 'post'])
    def messages(self, request, pk=None):
        if request.method == 'GET':
            return self._paginated(GroupService.messages(request.user, pk), GroupMessageSerializer)

        serializer = SendGroupMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = GroupService.send_message(
            request.user,
            pk,
            serializer.validated_data['content'],
            confirm_flagged=serializer.validated_data['confirm_flagged'],
        )
        return Response(GroupMessageSerializer(message).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=[APITags.GROUPS],
        summary="List flagged messages",
        description="Leaders only. Newest first.",
        responses={200: GroupMessageSerializer(many=True)}
    )
    @action(detail=True, methods=['get'])
    def flagged(self, request, pk=None):
        return self._paginated(GroupService.flagged_messages(request.user, pk), GroupMessageSerializer)

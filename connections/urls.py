"""
Connections URL configuration.
"""

from django.urls import path

from . import views

app_name = 'connections'

urlpatterns = [
    # Friends
    path('friends/', views.friends_list_view, name='friend-list'),
    path('friends/requests/', views.incoming_requests_view, name='friend-requests'),
    path('friends/requests/sent/', views.sent_requests_view, name='friend-requests-sent'),
    path('friends/request/', views.send_request_view, name='friend-request'),
    path('friends/requests/<uuid:request_id>/accept/', views.accept_request_view,
         name='friend-request-accept'),
    path('friends/requests/<uuid:request_id>/decline/', views.decline_request_view,
         name='friend-request-decline'),
    path('friends/<uuid:user_id>/', views.remove_friend_view, name='friend-remove'),
    path('friends/<uuid:user_id>/mutual/', views.mutual_friends_view, name='friend-mutual'),

    # Followers
    path('follow/<uuid:user_id>/', views.follow_view, name='follow'),
    path('followers/<uuid:user_id>/', views.followers_view, name='followers'),
    path('following/<uuid:user_id>/', views.following_view, name='following'),

    # Blocks
    path('blocks/', views.blocks_view, name='blocks'),
    path('blocks/<uuid:user_id>/', views.unblock_view, name='unblock'),
]

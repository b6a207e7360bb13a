from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [
    # Authentication
    path('login/', views.login, name='login'),

    # Current issuer
    path('issuer/', views.current_issuer, name='current-issuer'),
]

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'receipts'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.ReceiptViewSet, basename='receipt')

urlpatterns = [
    # Issuer routes
    # GET    /api/receipts/                  - List receipts in number order
    # GET    /api/receipts/{id}/             - Get receipt details
    # GET    /api/receipts/summary/          - Count receipts per state
    # POST   /api/receipts/initialize/       - Create the initial pool
    # POST   /api/receipts/grow/             - Append receipts to the pool
    # GET    /api/receipts/duplicates/       - Receipts already held by a name
    # POST   /api/receipts/{id}/issue/       - Issue to a student
    # POST   /api/receipts/{id}/mark_used/   - Mark an issued receipt used
    # POST   /api/receipts/{id}/send/        - Email the receipt PDF

    # Public routes
    # GET    /api/receipts/search/           - Search issued receipts
    # GET    /api/receipts/suggest/          - Name autosuggest
    # GET    /api/receipts/{id}/pdf/         - Printable receipt

    path('', include(router.urls)),
]

from django.http import HttpResponse
from rest_framework import viewsets, status, serializers as drf_serializers
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema, OpenApiParameter
from apps.accounts.permissions import IsIssuer
from apps.accounts.services import get_issuer_name
from .models import Receipt
from .serializers import (
    ReceiptSerializer,
    PoolSummarySerializer,
    DuplicateWarningSerializer,
    # Input serializers
    InitializePoolInputSerializer,
    GrowPoolInputSerializer,
    IssueReceiptInputSerializer,
    SendReceiptInputSerializer,
    DuplicateQuerySerializer,
    SearchQuerySerializer,
    SuggestQuerySerializer,
)
from .services import (
    initialize_pool,
    grow_pool,
    get_pool_summary,
    find_duplicates,
    get_receipt,
    issue_receipt,
    mark_used,
    search_receipts,
    suggest_names,
    send_receipt_email,
    ReceiptRenderer,
    AlreadyInitializedError,
    InvalidCountError,
    InvalidIssueDataError,
    InvalidTransitionError,
    PossibleDuplicateError,
    ReceiptNotFoundError,
    ReceiptStoreError,
    ReceiptRenderingError,
    DeliveryFailureError,
)


# Response serializers for API documentation
class PoolCreatedResponseSerializer(drf_serializers.Serializer):
    created = drf_serializers.IntegerField()
    first_number = drf_serializers.IntegerField()
    last_number = drf_serializers.IntegerField()


class ErrorResponseSerializer(drf_serializers.Serializer):
    error = drf_serializers.CharField()
    details = drf_serializers.CharField(required=False)


def _error_response(error, status_code):
    payload = {'error': str(error)}
    if error.__cause__ is not None:
        payload['details'] = str(error.__cause__)
    return Response(payload, status=status_code)


def _pool_created_response(receipts):
    return Response({
        'created': len(receipts),
        'first_number': receipts[0].receipt_number,
        'last_number': receipts[-1].receipt_number,
    }, status=status.HTTP_201_CREATED)


class ReceiptViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for receipt pool operations.

    Issuer only:
    list: Get all receipts in number order
    retrieve: Get a specific receipt
    summary / initialize / grow / duplicates / issue / mark_used / send

    Public:
    search / suggest / pdf
    """

    queryset = Receipt.objects.order_by('receipt_number', 'created_at')
    serializer_class = ReceiptSerializer
    permission_classes = [IsIssuer]

    PUBLIC_ACTIONS = ['search', 'suggest', 'pdf']

    def get_permissions(self):
        """Public search and printing; everything else needs an issuer."""
        if self.action in self.PUBLIC_ACTIONS:
            return [AllowAny()]
        return super().get_permissions()

    @extend_schema(responses={200: PoolSummarySerializer})
    @action(detail=False, methods=['get'])
    def summary(self, request):
        """
        Count receipts per state.

        GET /api/receipts/summary/
        """
        try:
            summary = get_pool_summary()
        except ReceiptStoreError as e:
            return _error_response(e, status.HTTP_503_SERVICE_UNAVAILABLE)

        return Response(PoolSummarySerializer(summary).data)

    @extend_schema(
        request=InitializePoolInputSerializer,
        responses={201: PoolCreatedResponseSerializer, 400: ErrorResponseSerializer},
    )
    @action(detail=False, methods=['post'])
    def initialize(self, request):
        """
        Create the initial receipt pool.

        POST /api/receipts/initialize/
        Body: {"size": 101}
        """
        input_serializer = InitializePoolInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            receipts = initialize_pool(size=input_serializer.validated_data.get('size'))
        except (AlreadyInitializedError, InvalidCountError) as e:
            return _error_response(e, status.HTTP_400_BAD_REQUEST)
        except ReceiptStoreError as e:
            return _error_response(e, status.HTTP_503_SERVICE_UNAVAILABLE)

        return _pool_created_response(receipts)

    @extend_schema(
        request=GrowPoolInputSerializer,
        responses={201: PoolCreatedResponseSerializer, 400: ErrorResponseSerializer},
    )
    @action(detail=False, methods=['post'])
    def grow(self, request):
        """
        Append receipts after the current highest number.

        POST /api/receipts/grow/
        Body: {"count": 10}
        """
        input_serializer = GrowPoolInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            receipts = grow_pool(count=input_serializer.validated_data['count'])
        except InvalidCountError as e:
            return _error_response(e, status.HTTP_400_BAD_REQUEST)
        except ReceiptStoreError as e:
            return _error_response(e, status.HTTP_503_SERVICE_UNAVAILABLE)

        return _pool_created_response(receipts)

    @extend_schema(
        parameters=[OpenApiParameter('name', str, required=True)],
        responses={200: ReceiptSerializer(many=True)},
    )
    @action(detail=False, methods=['get'])
    def duplicates(self, request):
        """
        List issued receipts already held by a student name.

        GET /api/receipts/duplicates/?name=Rohan%20Gupta
        """
        query_serializer = DuplicateQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)

        matches = find_duplicates(name=query_serializer.validated_data['name'])
        return Response(ReceiptSerializer(matches, many=True).data)

    @extend_schema(
        request=IssueReceiptInputSerializer,
        responses={
            201: ReceiptSerializer,
            400: ErrorResponseSerializer,
            404: ErrorResponseSerializer,
            409: DuplicateWarningSerializer,
        },
    )
    @action(detail=True, methods=['post'])
    def issue(self, request, pk=None):
        """
        Issue a receipt to a student.

        POST /api/receipts/{id}/issue/
        Body: {"student_name": "...", "section": "XII-B",
               "confirm_duplicate": false, "recipient_email": "optional"}

        Answers 409 with the matching receipts when the name already holds
        one; resend with confirm_duplicate=true to issue anyway.
        """
        input_serializer = IssueReceiptInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        try:
            receipt = issue_receipt(
                receipt_id=pk,
                student_name=data['student_name'],
                section=data['section'],
                issuing_party=get_issuer_name(request),
                check_duplicates=not data['confirm_duplicate'],
            )
        except PossibleDuplicateError as e:
            return Response({
                'error': str(e),
                'matches': ReceiptSerializer(e.matches, many=True).data,
            }, status=status.HTTP_409_CONFLICT)
        except ReceiptNotFoundError as e:
            return _error_response(e, status.HTTP_404_NOT_FOUND)
        except (InvalidTransitionError, InvalidIssueDataError) as e:
            return _error_response(e, status.HTTP_400_BAD_REQUEST)
        except ReceiptStoreError as e:
            return _error_response(e, status.HTTP_503_SERVICE_UNAVAILABLE)

        response_data = dict(ReceiptSerializer(receipt).data)

        # The issuance stands even if the email cannot be delivered
        recipient_email = data.get('recipient_email')
        if recipient_email:
            try:
                send_receipt_email(receipt=receipt, recipient_email=recipient_email)
                response_data['email_sent'] = True
            except (DeliveryFailureError, ReceiptRenderingError) as e:
                response_data['email_sent'] = False
                response_data['email_error'] = str(e)

        return Response(response_data, status=status.HTTP_201_CREATED)

    @extend_schema(
        request=None,
        responses={200: ReceiptSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    )
    @action(detail=True, methods=['post'])
    def mark_used(self, request, pk=None):
        """
        Mark an issued receipt as used by the logged-in issuer.

        POST /api/receipts/{id}/mark_used/
        """
        try:
            receipt = mark_used(receipt_id=pk, used_by=get_issuer_name(request))
        except ReceiptNotFoundError as e:
            return _error_response(e, status.HTTP_404_NOT_FOUND)
        except (InvalidTransitionError, InvalidIssueDataError) as e:
            return _error_response(e, status.HTTP_400_BAD_REQUEST)
        except ReceiptStoreError as e:
            return _error_response(e, status.HTTP_503_SERVICE_UNAVAILABLE)

        return Response(ReceiptSerializer(receipt).data)

    @extend_schema(
        request=SendReceiptInputSerializer,
        responses={200: ErrorResponseSerializer, 503: ErrorResponseSerializer},
    )
    @action(detail=True, methods=['post'])
    def send(self, request, pk=None):
        """
        Email the receipt PDF.

        POST /api/receipts/{id}/send/
        Body: {"recipient_email": "student@example.com"}
        """
        input_serializer = SendReceiptInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            receipt = get_receipt(receipt_id=pk)
            send_receipt_email(
                receipt=receipt,
                recipient_email=input_serializer.validated_data['recipient_email'],
            )
        except ReceiptNotFoundError as e:
            return _error_response(e, status.HTTP_404_NOT_FOUND)
        except InvalidTransitionError as e:
            return _error_response(e, status.HTTP_400_BAD_REQUEST)
        except (ReceiptStoreError, ReceiptRenderingError, DeliveryFailureError) as e:
            return _error_response(e, status.HTTP_503_SERVICE_UNAVAILABLE)

        return Response({'message': 'Email sent successfully'})

    @extend_schema(
        parameters=[
            OpenApiParameter('q', str),
            OpenApiParameter('by_name', bool),
        ],
        responses={200: ReceiptSerializer(many=True)},
    )
    @action(detail=False, methods=['get'])
    def search(self, request):
        """
        Public search by student name or receipt number.

        GET /api/receipts/search/?q=asha
        GET /api/receipts/search/?q=42&by_name=false

        Unissued receipts are never shown publicly.
        """
        query_serializer = SearchQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        params = query_serializer.validated_data

        try:
            results = search_receipts(query=params['q'], by_name=params['by_name'])
        except ReceiptStoreError as e:
            return _error_response(e, status.HTTP_503_SERVICE_UNAVAILABLE)

        issued = [receipt for receipt in results if receipt.is_issued]
        return Response(ReceiptSerializer(issued, many=True).data)

    @extend_schema(
        parameters=[OpenApiParameter('q', str)],
        responses={200: drf_serializers.ListSerializer(child=drf_serializers.CharField())},
    )
    @action(detail=False, methods=['get'])
    def suggest(self, request):
        """
        Public name autosuggest (up to 5 names).

        GET /api/receipts/suggest/?q=ash
        """
        query_serializer = SuggestQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)

        try:
            names = suggest_names(partial_name=query_serializer.validated_data['q'])
        except ReceiptStoreError as e:
            return _error_response(e, status.HTTP_503_SERVICE_UNAVAILABLE)

        return Response(names)

    @extend_schema(responses={(200, 'application/pdf'): OpenApiTypes.BINARY, 400: ErrorResponseSerializer})
    @action(detail=True, methods=['get'])
    def pdf(self, request, pk=None):
        """
        Download the printable receipt.

        GET /api/receipts/{id}/pdf/
        """
        renderer = ReceiptRenderer()

        try:
            receipt = get_receipt(receipt_id=pk)
            pdf_bytes = renderer.render(receipt)
        except ReceiptNotFoundError as e:
            return _error_response(e, status.HTTP_404_NOT_FOUND)
        except InvalidTransitionError as e:
            return _error_response(e, status.HTTP_400_BAD_REQUEST)
        except (ReceiptStoreError, ReceiptRenderingError) as e:
            return _error_response(e, status.HTTP_503_SERVICE_UNAVAILABLE)

        response = HttpResponse(pdf_bytes, content_type='application/pdf')
        response['Content-Disposition'] = f'inline; filename="{renderer.filename_for(receipt)}"'
        return response

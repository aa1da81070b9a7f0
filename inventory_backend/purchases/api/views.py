# purchases/api/views.py

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.errors import NotFoundError
from permissions.roles import (
    CAP_PURCHASES_APPROVE,
    CAP_PURCHASES_ORDER,
    HasAnyCapability,
    HasCapability,
)
from purchases.api.serializers import (
    PurchaseConfirmationSerializer,
    PurchaseConfirmSerializer,
    PurchaseOrderCreateSerializer,
    PurchaseOrderDecisionSerializer,
    PurchaseOrderSerializer,
    PurchaseOrderSubmitSerializer,
    SupplierSerializer,
)
from purchases.models import PurchaseOrder, Supplier
from purchases.services.purchase_orders import (
    approve_purchase_order,
    cancel_purchase_order,
    confirm_purchase_order,
    create_purchase_order,
    get_purchase_order,
    reject_purchase_order,
    submit_purchase_order,
)
from tenants.mixins import TenantScopedMixin


class _PurchasesView(TenantScopedMixin, GenericAPIView):
    """
    Reads need purchases.order or purchases.approve; writes declare their own
    capability through `write_capability`.
    """

    permission_classes = [IsAuthenticated]
    write_capability = CAP_PURCHASES_ORDER

    required_capability = None
    required_any_capabilities = None

    def get_permissions(self):
        self.required_capability = None
        self.required_any_capabilities = None

        if self.request.method in ("GET", "HEAD", "OPTIONS"):
            self.required_any_capabilities = {CAP_PURCHASES_ORDER, CAP_PURCHASES_APPROVE}
            return [IsAuthenticated(), HasAnyCapability()]

        self.required_capability = self.write_capability
        return [IsAuthenticated(), HasCapability()]

    def _order_payload(self, order):
        fresh = (
            PurchaseOrder.objects.select_related("supplier")
            .prefetch_related("items__product", "items__received_batch")
            .get(pk=order.pk)
        )
        return PurchaseOrderSerializer(fresh).data


class SupplierListCreateView(_PurchasesView):
    serializer_class = SupplierSerializer

    @extend_schema(tags=["purchases"], responses=SupplierSerializer(many=True))
    def get(self, request):
        qs = Supplier.objects.filter(company=self.company, is_active=True).order_by("name")
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(SupplierSerializer(page, many=True).data)
        return Response(SupplierSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["purchases"],
        request=SupplierSerializer,
        responses={201: SupplierSerializer},
    )
    def post(self, request):
        s = SupplierSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        supplier = s.save(company=self.company)
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED)


class SupplierDetailView(_PurchasesView):
    serializer_class = SupplierSerializer

    def _get(self, supplier_id):
        supplier = Supplier.objects.filter(company=self.company, pk=supplier_id).first()
        if supplier is None:
            raise NotFoundError(f"Supplier {supplier_id} not found")
        return supplier

    @extend_schema(tags=["purchases"], responses=SupplierSerializer)
    def get(self, request, supplier_id):
        return Response(SupplierSerializer(self._get(supplier_id)).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["purchases"], request=SupplierSerializer, responses=SupplierSerializer)
    def patch(self, request, supplier_id):
        s = SupplierSerializer(self._get(supplier_id), data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        return Response(SupplierSerializer(s.save()).data, status=status.HTTP_200_OK)


class PurchaseOrderListCreateView(_PurchasesView):
    serializer_class = PurchaseOrderSerializer

    @extend_schema(tags=["purchases"], responses=PurchaseOrderSerializer(many=True))
    def get(self, request):
        qs = (
            PurchaseOrder.objects.filter(company=self.company)
            .select_related("supplier")
            .prefetch_related("items__product", "items__received_batch")
            .order_by("-created_at")
        )
        status_filter = (request.query_params.get("status") or "").strip().upper()
        if status_filter:
            qs = qs.filter(status=status_filter)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(PurchaseOrderSerializer(page, many=True).data)
        return Response(PurchaseOrderSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["purchases"],
        request=PurchaseOrderCreateSerializer,
        responses={201: PurchaseOrderSerializer},
    )
    def post(self, request):
        s = PurchaseOrderCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        order = create_purchase_order(
            company=self.company,
            supplier_id=data["supplier_id"],
            items=[dict(i) for i in data["items"]],
            order_type=data["order_type"],
            approver_id=data.get("approver_id"),
            order_date=data.get("order_date"),
            comment=data.get("comment", ""),
            user=request.user,
        )
        return Response(self._order_payload(order), status=status.HTTP_201_CREATED)


class PurchaseOrderDetailView(_PurchasesView):
    serializer_class = PurchaseOrderSerializer

    @extend_schema(tags=["purchases"], responses=PurchaseOrderSerializer)
    def get(self, request, order_id):
        order = get_purchase_order(company=self.company, order_id=order_id)
        return Response(self._order_payload(order), status=status.HTTP_200_OK)


class PurchaseOrderSubmitView(_PurchasesView):
    serializer_class = PurchaseOrderSubmitSerializer

    @extend_schema(tags=["purchases"], request=PurchaseOrderSubmitSerializer, responses=PurchaseOrderSerializer)
    def post(self, request, order_id):
        s = PurchaseOrderSubmitSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        order = submit_purchase_order(
            company=self.company,
            order_id=order_id,
            approver_id=s.validated_data.get("approver_id"),
            user=request.user,
        )
        return Response(self._order_payload(order), status=status.HTTP_200_OK)


class PurchaseOrderDecisionView(_PurchasesView):
    serializer_class = PurchaseOrderDecisionSerializer
    write_capability = CAP_PURCHASES_APPROVE

    @extend_schema(
        tags=["purchases"], request=PurchaseOrderDecisionSerializer, responses=PurchaseOrderSerializer
    )
    def post(self, request, order_id):
        s = PurchaseOrderDecisionSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        if data["status"] == PurchaseOrder.STATUS_APPROVED:
            order = approve_purchase_order(company=self.company, order_id=order_id, user=request.user)
        else:
            order = reject_purchase_order(
                company=self.company,
                order_id=order_id,
                comment=data.get("comment", ""),
                user=request.user,
            )
        return Response(self._order_payload(order), status=status.HTTP_200_OK)


class PurchaseOrderCancelView(_PurchasesView):
    serializer_class = PurchaseOrderSerializer

    @extend_schema(tags=["purchases"], request=None, responses=PurchaseOrderSerializer)
    def post(self, request, order_id):
        order = cancel_purchase_order(company=self.company, order_id=order_id, user=request.user)
        return Response(self._order_payload(order), status=status.HTTP_200_OK)


class PurchaseOrderConfirmView(_PurchasesView):
    serializer_class = PurchaseConfirmSerializer

    @extend_schema(
        tags=["purchases"],
        request=PurchaseConfirmSerializer,
        responses={201: PurchaseConfirmationSerializer},
    )
    def post(self, request, order_id):
        s = PurchaseConfirmSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        confirmation = confirm_purchase_order(
            company=self.company,
            order_id=order_id,
            comment=s.validated_data.get("comment", ""),
            user=request.user,
        )
        return Response(
            PurchaseConfirmationSerializer(confirmation).data, status=status.HTTP_201_CREATED
        )

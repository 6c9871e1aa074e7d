import logging

from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from pos_backend.core.utils import create_audit_log
from .models import Customer, Supplier
from .serializers import CustomerSerializer, SupplierSerializer

logger = logging.getLogger('pos_backend.parties')


# Customer views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def customer_list_create(request):
    """List all customers or create a new customer"""
    if request.method == 'GET':
        queryset = Customer.objects.all()
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(phone__icontains=search) | Q(email__icontains=search)
            )
        serializer = CustomerSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = CustomerSerializer(data=request.data)
        if serializer.is_valid():
            customer = serializer.save()
            create_audit_log(request=request, action='create', model_name='Customer',
                             object_id=customer.id, object_name=customer.name)
            logger.info(f"User {request.user.email} created customer {customer.name}")
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def customer_detail(request, pk):
    """Retrieve, update or delete a customer"""
    customer = get_object_or_404(Customer, pk=pk)

    if request.method == 'GET':
        serializer = CustomerSerializer(customer)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CustomerSerializer(customer, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='Customer',
                             object_id=customer.id, object_name=customer.name)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        customer_id, name = customer.id, customer.name
        customer.delete()
        create_audit_log(request=request, action='delete', model_name='Customer',
                         object_id=customer_id, object_name=name)
        logger.info(f"User {request.user.email} deleted customer {name}")
        return Response(status=status.HTTP_204_NO_CONTENT)


# Supplier views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def supplier_list_create(request):
    """List all suppliers or create a new supplier"""
    if request.method == 'GET':
        queryset = Supplier.objects.all()
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(supplier_name__icontains=search) | Q(contact__icontains=search) | Q(email__icontains=search)
            )
        serializer = SupplierSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = SupplierSerializer(data=request.data)
        if serializer.is_valid():
            supplier = serializer.save()
            create_audit_log(request=request, action='create', model_name='Supplier',
                             object_id=supplier.id, object_name=supplier.supplier_name)
            logger.info(f"User {request.user.email} created supplier {supplier.supplier_name}")
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def supplier_detail(request, pk):
    """Retrieve, update or delete a supplier"""
    supplier = get_object_or_404(Supplier, pk=pk)

    if request.method == 'GET':
        serializer = SupplierSerializer(supplier)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SupplierSerializer(supplier, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='Supplier',
                             object_id=supplier.id, object_name=supplier.supplier_name)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        supplier_id, name = supplier.id, supplier.supplier_name
        supplier.delete()
        create_audit_log(request=request, action='delete', model_name='Supplier',
                         object_id=supplier_id, object_name=name)
        logger.info(f"User {request.user.email} deleted supplier {name}")
        return Response(status=status.HTTP_204_NO_CONTENT)

import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from pos_backend.core.utils import create_audit_log
from .models import StoreLocation
from .serializers import StoreLocationSerializer

logger = logging.getLogger('pos_backend.locations')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def store_location_list_create(request):
    """List all store locations or create a new one"""
    if request.method == 'GET':
        queryset = StoreLocation.objects.all()
        is_active = request.query_params.get('is_active', None)
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active.lower() in ('true', '1', 'yes'))
        serializer = StoreLocationSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = StoreLocationSerializer(data=request.data)
        if serializer.is_valid():
            location = serializer.save()
            create_audit_log(request=request, action='create', model_name='StoreLocation',
                             object_id=location.id, object_name=location.location_name)
            logger.info(f"User {request.user.email} created store location {location.location_name}")
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def store_location_detail(request, pk):
    """Retrieve, update or delete a store location"""
    location = get_object_or_404(StoreLocation, pk=pk)

    if request.method == 'GET':
        serializer = StoreLocationSerializer(location)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = StoreLocationSerializer(location, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            location = serializer.save()
            create_audit_log(request=request, action='update', model_name='StoreLocation',
                             object_id=location.id, object_name=location.location_name)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        location_id, name = location.id, location.location_name
        location.delete()
        create_audit_log(request=request, action='delete', model_name='StoreLocation',
                         object_id=location_id, object_name=name)
        logger.info(f"User {request.user.email} deleted store location {name}")
        return Response(status=status.HTTP_204_NO_CONTENT)

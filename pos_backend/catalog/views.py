import logging
from urllib.parse import unquote

from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from pos_backend.core.permissions import IsAdminRole
from pos_backend.core.utils import create_audit_log
from .filters import ProductFilter
from .importers import ImportFileError, read_rows, import_products
from .label_generator import generate_label_image
from .models import Category, Unit, Product
from .serializers import CategorySerializer, UnitSerializer, ProductSerializer, DeletedProductSerializer

logger = logging.getLogger('pos_backend.catalog')

# Fields compared before and after an update for the audit trail
TRACKED_PRODUCT_FIELDS = ('product_name', 'item_code', 'barcode', 'buying_cost', 'sales_price',
                          'minimum_price', 'mrp', 'opening_stock_quantity')


def _snapshot(product):
    return {field: str(getattr(product, field)) if getattr(product, field) is not None else None
            for field in TRACKED_PRODUCT_FIELDS}


# Category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def category_list_create(request):
    """List all categories or create a new category"""
    if request.method == 'GET':
        categories = Category.objects.all()
        serializer = CategorySerializer(categories, many=True)
        return Response(serializer.data)
    else:
        serializer = CategorySerializer(data=request.data)
        if serializer.is_valid():
            category = serializer.save()
            create_audit_log(request=request, action='create', model_name='Category',
                             object_id=category.id, object_name=category.name)
            logger.info(f"User {request.user.email} created category {category.name}")
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def category_detail(request, pk):
    """Retrieve, update or delete a category"""
    category = get_object_or_404(Category, pk=pk)

    if request.method == 'GET':
        serializer = CategorySerializer(category)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        old_name = category.name
        serializer = CategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            category = serializer.save()
            changes = {'name': {'old': old_name, 'new': category.name}} if old_name != category.name else None
            create_audit_log(request=request, action='update', model_name='Category',
                             object_id=category.id, object_name=category.name, changes=changes)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        category_id, name = category.id, category.name
        category.delete()
        create_audit_log(request=request, action='delete', model_name='Category',
                         object_id=category_id, object_name=name)
        logger.info(f"User {request.user.email} deleted category {name}")
        return Response(status=status.HTTP_204_NO_CONTENT)


# Unit views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def unit_list_create(request):
    """List all units or create a new unit"""
    if request.method == 'GET':
        units = Unit.objects.all()
        serializer = UnitSerializer(units, many=True)
        return Response(serializer.data)
    else:
        serializer = UnitSerializer(data=request.data)
        if serializer.is_valid():
            unit = serializer.save()
            create_audit_log(request=request, action='create', model_name='Unit',
                             object_id=unit.id, object_name=unit.name)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def unit_detail(request, pk):
    """Retrieve, update or delete a unit"""
    unit = get_object_or_404(Unit, pk=pk)

    if request.method == 'GET':
        serializer = UnitSerializer(unit)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = UnitSerializer(unit, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            unit = serializer.save()
            create_audit_log(request=request, action='update', model_name='Unit',
                             object_id=unit.id, object_name=unit.name)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        unit_id, name = unit.id, unit.name
        unit.delete()
        create_audit_log(request=request, action='delete', model_name='Unit', object_id=unit_id, object_name=name)
        return Response(status=status.HTTP_204_NO_CONTENT)


# Product views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List all live products with their stock or create a new product"""
    if request.method == 'GET':
        queryset = Product.objects.active().with_stock()

        filterset = ProductFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)

        serializer = ProductSerializer(filterset.qs, many=True)
        return Response(serializer.data)

    serializer = ProductSerializer(data=request.data)
    if serializer.is_valid():
        product = serializer.save()
        create_audit_log(request=request, action='create', model_name='Product',
                         object_id=product.id, object_name=product.product_name)
        logger.info(f"User {request.user.email} created product {product.product_name} (id={product.id})")
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or move a product to the deleted bin"""
    product = get_object_or_404(Product.objects.active().with_stock(), pk=pk)

    if request.method == 'GET':
        serializer = ProductSerializer(product)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            old_data = _snapshot(product)
            serializer.save()
            new_data = _snapshot(product)
            changes = {k: {'old': old_data[k], 'new': new_data[k]} for k in old_data if old_data[k] != new_data[k]}
            if changes:
                create_audit_log(request=request, action='update', model_name='Product',
                                 object_id=product.id, object_name=product.product_name, changes=changes)
            # Re-read so stock reflects the new opening quantity
            refreshed = Product.objects.with_stock().get(pk=product.pk)
            return Response(ProductSerializer(refreshed).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        product.soft_delete()
        create_audit_log(request=request, action='soft_delete', model_name='Product',
                         object_id=product.id, object_name=product.product_name)
        logger.info(f"User {request.user.email} moved product {product.product_name} (id={product.id}) to the deleted bin")
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def product_delete_by_name(request, product_name):
    """Move every live product with the given name to the deleted bin"""
    product_name = unquote(product_name)
    products = list(Product.objects.active().filter(product_name=product_name))
    if not products:
        return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)

    now = timezone.now()
    Product.objects.filter(pk__in=[p.pk for p in products]).update(deleted_at=now, updated_at=now)
    for product in products:
        create_audit_log(request=request, action='soft_delete', model_name='Product',
                         object_id=product.id, object_name=product.product_name)
    logger.info(f"User {request.user.email} moved {len(products)} product(s) named '{product_name}' to the deleted bin")
    return Response({'message': 'Product moved to deleted items', 'count': len(products)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def product_restore(request, product_name):
    """Restore binned products with the given name"""
    product_name = unquote(product_name)
    products = list(Product.objects.deleted().filter(product_name=product_name))
    if not products:
        return Response({'error': 'Product not found in deleted items'}, status=status.HTTP_404_NOT_FOUND)

    Product.objects.filter(pk__in=[p.pk for p in products]).update(deleted_at=None, updated_at=timezone.now())
    for product in products:
        create_audit_log(request=request, action='restore', model_name='Product',
                         object_id=product.id, object_name=product.product_name)
    logger.info(f"User {request.user.email} restored {len(products)} product(s) named '{product_name}'")
    return Response({'message': 'Product restored successfully', 'count': len(products)})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def product_permanent_delete(request, product_name):
    """Permanently remove binned products with the given name"""
    product_name = unquote(product_name)
    products = list(Product.objects.deleted().filter(product_name=product_name))
    if not products:
        return Response({'error': 'Product not found in deleted items'}, status=status.HTTP_404_NOT_FOUND)

    for product in products:
        product_id = product.id
        # Sale lines keep their product_name/item_code snapshot
        product.delete()
        create_audit_log(request=request, action='delete', model_name='Product',
                         object_id=product_id, object_name=product_name)
    logger.info(f"User {request.user.email} permanently deleted {len(products)} product(s) named '{product_name}'")
    return Response({'message': 'Product permanently deleted', 'count': len(products)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def deleted_items(request):
    """List the deleted bin"""
    products = Product.objects.deleted().order_by('-deleted_at', 'id')
    serializer = DeletedProductSerializer(products, many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def product_import(request):
    """Import products from an uploaded xlsx, xls or csv file"""
    uploaded_file = request.FILES.get('file')
    logger.info(f"User {request.user.email} started a product import: "
                f"{uploaded_file.name if uploaded_file else 'no file'}")

    try:
        rows = read_rows(uploaded_file)
    except ImportFileError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    try:
        result = import_products(rows)
    except Exception as e:
        # The transaction has already been rolled back
        logger.error(f"Error importing products: {str(e)}", exc_info=True)
        return Response({'message': 'Error importing products', 'error': str(e)},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    imported = result['imported']
    skipped = result['skipped']
    create_audit_log(request=request, action='import', model_name='Product', object_id='import',
                     object_name=uploaded_file.name,
                     changes={'imported': len(imported), 'skipped': len(skipped)})
    return Response({
        'message': 'Products imported successfully',
        'imported_count': len(imported),
        'skipped_count': len(skipped),
        'imported_products': ProductSerializer(imported, many=True).data,
        'skipped_rows': skipped,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_barcode(request, pk):
    """Code128 label image for a product"""
    product = get_object_or_404(Product, pk=pk)
    barcode_value = product.get_label_value()
    label_image = generate_label_image(
        product_name=product.product_name,
        barcode_value=barcode_value,
        price=f"MRP {product.mrp}",
    )
    return Response({
        'product_id': product.id,
        'product_name': product.product_name,
        'barcode': barcode_value,
        'label_image': label_image,
    })

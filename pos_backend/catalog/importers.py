"""
Product bulk import from spreadsheets (xlsx, xls, csv).

The first row is a header and is discarded. Columns are read by position:

    0 product_name        7 wholesale_price          14 supplier
    1 item_code           8 barcode                  15 unit_type
    2 batch_number        9 mrp                      16 store_location
    3 expiry_date        10 minimum_stock_quantity   17 cabinet
    4 buying_cost        11 opening_stock_quantity   18 row
    5 sales_price        12 opening_stock_value      19 extra field name
    6 minimum_price      13 category                 20 extra field value

Every row goes through ProductSerializer, so imported products obey the same
rules as products created through the API.
"""
import datetime
import logging
import os

import pandas as pd
from django.conf import settings
from django.db import transaction

from .serializers import ProductSerializer

logger = logging.getLogger('pos_backend.catalog')

ALLOWED_EXTENSIONS = ('.xlsx', '.xls', '.csv')

COLUMNS = [
    'product_name', 'item_code', 'batch_number', 'expiry_date', 'buying_cost',
    'sales_price', 'minimum_price', 'wholesale_price', 'barcode', 'mrp',
    'minimum_stock_quantity', 'opening_stock_quantity', 'opening_stock_value',
    'category', 'supplier', 'unit_type', 'store_location', 'cabinet', 'row',
]
EXTRA_NAME_COLUMN = 19
EXTRA_VALUE_COLUMN = 20
ROW_WIDTH = 21

# Empty cells in these columns are imported as 0
NUMERIC_COLUMNS = (
    'buying_cost', 'sales_price', 'minimum_price', 'wholesale_price', 'mrp',
    'minimum_stock_quantity', 'opening_stock_quantity', 'opening_stock_value',
)

# Spreadsheet row number of the first data row (1-based, after the header)
FIRST_DATA_ROW = 2


class ImportFileError(Exception):
    """The uploaded file is missing, of an unsupported type or unreadable"""
    pass


def clean_cell(value):
    """Normalize a spreadsheet cell to None or a string the serializer can parse"""
    if value is None:
        return None
    if isinstance(value, (datetime.datetime, pd.Timestamp)):
        if pd.isna(value):
            return None
        return value.date().isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, float):
        if pd.isna(value):
            return None
        # Excel stores every number as a float
        if value.is_integer():
            return str(int(value))
    text = str(value).strip()
    return text or None


def read_rows(uploaded_file, filename=None):
    """
    Read a spreadsheet into a list of data rows (header removed).

    Args:
        uploaded_file: file path or file-like object
        filename: name used to detect the file type (defaults to uploaded_file.name)

    Raises:
        ImportFileError: unsupported extension, unreadable file or too many rows
    """
    if uploaded_file is None:
        raise ImportFileError('No file uploaded')

    filename = filename or getattr(uploaded_file, 'name', None) or str(uploaded_file)
    extension = os.path.splitext(filename)[1].lower()
    if extension not in ALLOWED_EXTENSIONS:
        raise ImportFileError('The file must be a file of type: xlsx, xls, csv.')

    try:
        if extension == '.csv':
            frame = pd.read_csv(uploaded_file, header=None, names=range(ROW_WIDTH), usecols=range(ROW_WIDTH),
                                index_col=False, dtype=str, keep_default_na=False, skip_blank_lines=True)
        else:
            engine = 'openpyxl' if extension == '.xlsx' else 'xlrd'
            frame = pd.read_excel(uploaded_file, header=None, dtype=object, engine=engine)
    except Exception as e:
        logger.warning(f"Could not read import file {filename}: {str(e)}")
        raise ImportFileError(f'Could not read the file: {str(e)}') from e

    rows = frame.values.tolist()
    if not rows:
        raise ImportFileError('The file is empty.')

    header, rows = rows[0], rows[1:]
    logger.info(f"Import file {filename}: header={[clean_cell(cell) for cell in header]}, {len(rows)} data rows")

    max_rows = settings.PRODUCT_IMPORT_MAX_ROWS
    if len(rows) > max_rows:
        raise ImportFileError(f'The file has {len(rows)} rows; at most {max_rows} can be imported at once.')
    return rows


def map_row(row):
    """Map a positional row to product fields"""
    cells = [clean_cell(cell) for cell in list(row)[:ROW_WIDTH]]
    cells += [None] * (ROW_WIDTH - len(cells))

    data = dict(zip(COLUMNS, cells))
    for column in NUMERIC_COLUMNS:
        if data[column] is None:
            data[column] = 0

    extra_name = cells[EXTRA_NAME_COLUMN]
    extra_value = cells[EXTRA_VALUE_COLUMN]
    if extra_name is not None or extra_value is not None:
        data['extra_fields'] = {'extra_field_name': extra_name, 'extra_field_value': extra_value}
    else:
        data['extra_fields'] = {}
    return data


def import_products(rows):
    """
    Validate and insert product rows inside a single transaction.

    Rows without a product name or failing validation are skipped and reported.
    Any unexpected error rolls back every insert of the import.

    Returns:
        dict: {'imported': [Product, ...], 'skipped': [{'row': n, 'errors': {...}}, ...]}
    """
    imported = []
    skipped = []

    with transaction.atomic():
        for index, row in enumerate(rows):
            row_number = index + FIRST_DATA_ROW
            data = map_row(row)

            if not data['product_name']:
                logger.warning(f"Skipping row {row_number}: missing product_name")
                skipped.append({'row': row_number, 'errors': {'product_name': ['Product name is missing.']}})
                continue

            serializer = ProductSerializer(data=data)
            if not serializer.is_valid():
                logger.warning(f"Skipping row {row_number} ({data['product_name']}): {serializer.errors}")
                skipped.append({'row': row_number, 'errors': serializer.errors})
                continue

            imported.append(serializer.save())

    logger.info(f"Product import finished: {len(imported)} imported, {len(skipped)} skipped")
    return {'imported': imported, 'skipped': skipped}

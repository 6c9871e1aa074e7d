"""
Management command to import products from a spreadsheet
"""
import os

from django.core.management.base import BaseCommand, CommandError

from pos_backend.catalog.importers import ImportFileError, read_rows, import_products


class Command(BaseCommand):
    help = "Imports products from an xlsx, xls or csv file (first row is the header)"

    def add_arguments(self, parser):
        parser.add_argument('path', type=str, help='Path to the spreadsheet')

    def handle(self, *args, **options):
        path = options['path']
        if not os.path.exists(path):
            raise CommandError(f"File not found: {path}")

        self.stdout.write(f"Importing products from {path}")
        try:
            rows = read_rows(path)
        except ImportFileError as e:
            raise CommandError(str(e))

        result = import_products(rows)

        for skipped in result['skipped']:
            errors = '; '.join(
                f"{field}: {' '.join(str(message) for message in messages)}"
                for field, messages in skipped['errors'].items()
            )
            self.stdout.write(self.style.WARNING(f"Row {skipped['row']} skipped - {errors}"))

        self.stdout.write(self.style.SUCCESS(
            f"Imported {len(result['imported'])} product(s), skipped {len(result['skipped'])} row(s)"
        ))

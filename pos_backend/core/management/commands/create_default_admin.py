from django.core.management.base import BaseCommand

from pos_backend.core.utils import ensure_default_admin


class Command(BaseCommand):
    help = 'Create the default admin account from DEFAULT_ADMIN_* settings if it does not exist'

    def handle(self, *args, **options):
        user, created = ensure_default_admin()
        if created:
            self.stdout.write(self.style.SUCCESS(f'Created default admin: {user.email}'))
        else:
            self.stdout.write(f'Default admin already exists: {user.email}')

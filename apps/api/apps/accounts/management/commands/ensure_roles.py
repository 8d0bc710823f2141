"""
Management command to ensure the fixed roles exist (for Docker startup).
"""
import os

from django.core.management.base import BaseCommand

from apps.accounts.models import Role, RoleChoices, User


class Command(BaseCommand):
    help = 'Create the hospital, blood_bank and volunteer roles (and optionally a superuser)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--with-superuser',
            action='store_true',
            help='Also create DJANGO_SUPERUSER_EMAIL if it does not exist',
        )

    def handle(self, *args, **options):
        for name in RoleChoices.values:
            _, created = Role.objects.get_or_create(name=name)
            if created:
                self.stdout.write(self.style.SUCCESS(f'Role "{name}" created'))
            else:
                self.stdout.write(f'Role "{name}" already exists')

        if not options['with_superuser']:
            return

        email = os.environ.get('DJANGO_SUPERUSER_EMAIL', 'admin@example.com')
        password = os.environ.get('DJANGO_SUPERUSER_PASSWORD', 'admin123dev')

        if not User.objects.filter(email=email).exists():
            User.objects.create_superuser(email=email, password=password)
            self.stdout.write(
                self.style.SUCCESS(f'Superuser "{email}" created successfully')
            )
        else:
            self.stdout.write(
                self.style.WARNING(f'Superuser "{email}" already exists')
            )

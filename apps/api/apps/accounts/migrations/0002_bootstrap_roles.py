# Bootstrap the three fixed roles

from django.db import migrations

ROLE_NAMES = ('hospital', 'blood_bank', 'volunteer')


def create_roles(apps, schema_editor):
    """
    Create the fixed roles if they don't exist.
    Idempotent - safe to run multiple times.
    """
    Role = apps.get_model('accounts', 'Role')
    for name in ROLE_NAMES:
        Role.objects.get_or_create(name=name)


def remove_unused_roles(apps, schema_editor):
    """
    Reverse migration - delete roles nobody holds.
    """
    Role = apps.get_model('accounts', 'Role')
    UserRole = apps.get_model('accounts', 'UserRole')

    for role in Role.objects.filter(name__in=ROLE_NAMES):
        if not UserRole.objects.filter(role=role).exists():
            role.delete()


class Migration(migrations.Migration):

    dependencies = [
        ('accounts', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(
            create_roles,
            remove_unused_roles
        ),
    ]

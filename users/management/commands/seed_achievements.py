"""
Django management command to install the default achievement catalogue

Usage:
    python manage.py seed_achievements
"""

from django.core.management.base import BaseCommand

from users.achievements import install_default_achievements


class Command(BaseCommand):
    help = "Create the default reader achievements (existing ones are kept)"

    def handle(self, *args, **options):
        created = install_default_achievements()
        if created:
            self.stdout.write(self.style.SUCCESS(f"Created {created} achievements"))
        else:
            self.stdout.write(self.style.WARNING("All achievements already exist"))

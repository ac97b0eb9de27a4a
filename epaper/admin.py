from django.contrib import admin

from .models import EPaper

admin.site.register(EPaper)

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from accounts.models import User


@admin.register(User)
class PharmiaUserAdmin(UserAdmin):
    list_display = ["email", "first_name", "last_name", "role", "master_class_credits", "pharmia_credits"]
    list_filter = ["role"]
    search_fields = ["email", "first_name", "last_name", "phone_number"]
    fieldsets = UserAdmin.fieldsets + (
        ("PharmIA", {"fields": ("role", "phone_number", "master_class_credits", "pharmia_credits")}),
    )

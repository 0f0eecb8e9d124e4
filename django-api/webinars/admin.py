from django.contrib import admin

from webinars.models import Attendee, NewsletterMembership, Webinar


class AttendeeInline(admin.TabularInline):
    model = Attendee
    extra = 0
    fields = ["user", "status", "time_slots", "proof_url", "used_credit"]
    raw_id_fields = ["user"]


@admin.register(Webinar)
class WebinarAdmin(admin.ModelAdmin):
    list_display = ["title", "group", "date", "price", "publication_status"]
    list_filter = ["group", "publication_status"]
    search_fields = ["title", "presenter"]
    inlines = [AttendeeInline]


@admin.register(Attendee)
class AttendeeAdmin(admin.ModelAdmin):
    list_display = ["webinar", "user", "status", "used_credit", "registered_at"]
    list_filter = ["status", "webinar__group"]
    raw_id_fields = ["user"]


@admin.register(NewsletterMembership)
class NewsletterMembershipAdmin(admin.ModelAdmin):
    list_display = ["email", "group_name", "created_at"]
    list_filter = ["group_name"]

from django.contrib import admin
from .models import Visitor, Visit, SystemLog


class VisitInline(admin.TabularInline):
    model = Visit
    extra = 0
    fields = ('purpose', 'check_in_time', 'check_out_time', 'active')
    readonly_fields = ('check_in_time',)


@admin.register(Visitor)
class VisitorAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'phone_number', 'year_of_birth', 'municipality', 'verified', 'deleted', 'created_at')
    list_filter = ('verified', 'deleted')
    search_fields = ('full_name', 'phone_number', 'email')
    inlines = [VisitInline]


@admin.register(Visit)
class VisitAdmin(admin.ModelAdmin):
    list_display = ('visitor', 'purpose', 'check_in_time', 'check_out_time', 'active')
    list_filter = ('active',)
    search_fields = ('visitor__full_name', 'visitor__phone_number')
    raw_id_fields = ('visitor',)


@admin.register(SystemLog)
class SystemLogAdmin(admin.ModelAdmin):
    list_display = ('action', 'details', 'created_at')
    list_filter = ('action',)
    readonly_fields = ('action', 'details', 'created_at')

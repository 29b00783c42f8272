from django.db import models
from django.utils import timezone
from vms.utils.phone_utils import NormalizedPhoneNumberField


class Visitor(models.Model):
    full_name = models.CharField(max_length=255)
    year_of_birth = models.PositiveIntegerField()
    email = models.EmailField(max_length=255, blank=True, null=True)
    # Primary lookup key, stored normalized
    phone_number = NormalizedPhoneNumberField(unique=True)
    municipality = models.CharField(max_length=100, blank=True)

    verified = models.BooleanField(default=False)
    # Soft delete: hidden from lookups and check-ins, kept for visit history
    deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.full_name} ({self.phone_number})"


class Visit(models.Model):
    visitor = models.ForeignKey(Visitor, on_delete=models.CASCADE, related_name='visits')
    purpose = models.CharField(max_length=255, blank=True, null=True)
    check_in_time = models.DateTimeField(default=timezone.now)
    check_out_time = models.DateTimeField(null=True, blank=True)
    active = models.BooleanField(default=True)

    class Meta:
        ordering = ['-check_in_time']
        constraints = [
            # A visitor is on the premises at most once at a time
            models.UniqueConstraint(
                fields=['visitor'],
                condition=models.Q(active=True),
                name='unique_active_visit_per_visitor'
            )
        ]
        indexes = [
            models.Index(fields=['visitor', 'active'], name='visit_visitor_active_idx'),
            models.Index(fields=['check_in_time'], name='visit_check_in_time_idx'),
        ]

    def __str__(self):
        state = "active" if self.active else "completed"
        return f"Visit {self.pk} for {self.visitor.full_name} ({state})"

    def check_out(self, when=None):
        self.check_out_time = when or timezone.now()
        self.active = False
        self.save(update_fields=['check_out_time', 'active'])


class SystemLog(models.Model):
    ACTION_CHOICES = [
        ('RETURNING_VISITOR_LOOKUP', 'Returning visitor lookup'),
        ('RETURNING_VISITOR', 'Returning visitor check-in'),
        ('RETURNING_VISITOR_DIRECT', 'Returning visitor direct check-in'),
        ('VISITOR_CHECK_IN', 'Visitor check-in'),
        ('VISITOR_CHECK_OUT', 'Visitor check-out'),
        ('AUTO_CHECKOUT', 'Automatic check-out'),
    ]

    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    details = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.action} at {self.created_at:%Y-%m-%d %H:%M}"

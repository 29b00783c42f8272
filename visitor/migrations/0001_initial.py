import django.db.models.deletion
import django.utils.timezone
import vms.utils.phone_utils
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='SystemLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('RETURNING_VISITOR_LOOKUP', 'Returning visitor lookup'), ('RETURNING_VISITOR', 'Returning visitor check-in'), ('RETURNING_VISITOR_DIRECT', 'Returning visitor direct check-in'), ('VISITOR_CHECK_IN', 'Visitor check-in'), ('VISITOR_CHECK_OUT', 'Visitor check-out'), ('AUTO_CHECKOUT', 'Automatic check-out')], max_length=50)),
                ('details', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Visitor',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('full_name', models.CharField(max_length=255)),
                ('year_of_birth', models.PositiveIntegerField()),
                ('email', models.EmailField(blank=True, max_length=255, null=True)),
                ('phone_number', vms.utils.phone_utils.NormalizedPhoneNumberField(unique=True)),
                ('municipality', models.CharField(blank=True, max_length=100)),
                ('verified', models.BooleanField(default=False)),
                ('deleted', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Visit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('purpose', models.CharField(blank=True, max_length=255, null=True)),
                ('check_in_time', models.DateTimeField(default=django.utils.timezone.now)),
                ('check_out_time', models.DateTimeField(blank=True, null=True)),
                ('active', models.BooleanField(default=True)),
                ('visitor', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='visits', to='visitor.visitor')),
            ],
            options={
                'ordering': ['-check_in_time'],
                'indexes': [models.Index(fields=['visitor', 'active'], name='visit_visitor_active_idx'), models.Index(fields=['check_in_time'], name='visit_check_in_time_idx')],
                'constraints': [models.UniqueConstraint(condition=models.Q(('active', True)), fields=('visitor',), name='unique_active_visit_per_visitor')],
            },
        ),
    ]

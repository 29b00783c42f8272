from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('visitor.urls')),
]

# URL Structure:
# POST /api/visitors/lookup
# POST /api/visitors/check-in
# POST /api/visitors/check-in/returning
# POST /api/visitors/check-out
# GET  /api/visitors/{id}/active-visit
# GET  /api/integration/visitors
# GET  /api/integration/visitors/{id}
# GET  /api/integration/visitors/{id}/visits

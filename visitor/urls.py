from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import VisitorDirectoryViewSet, IntegrationVisitorViewSet

router = DefaultRouter(trailing_slash=False)
router.register(r'visitors', VisitorDirectoryViewSet, basename='visitors')
router.register(r'integration/visitors', IntegrationVisitorViewSet, basename='integration-visitors')

urlpatterns = [
    path('', include(router.urls)),
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

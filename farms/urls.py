from django.urls import path

from .views import FarmListView, FarmDetailView, ShedListView, ShedDetailView

urlpatterns = [
    path('farms/', FarmListView.as_view(), name='farm-list'),
    path('farms/<uuid:farm_id>/', FarmDetailView.as_view(), name='farm-detail'),
    path('sheds/', ShedListView.as_view(), name='shed-list'),
    path('sheds/<uuid:shed_id>/', ShedDetailView.as_view(), name='shed-detail'),
]

from django.urls import path

from .views import (
    ProductionListView,
    ProductionDetailView,
    MortalityListView,
    FlockRecordListView,
    ProductionCycleListView,
    ProductionCycleDetailView,
    ProductionCycleActivateView,
    DispatchListView,
)

urlpatterns = [
    # Daily production
    path('production/', ProductionListView.as_view(), name='production-list'),
    path('production/<uuid:record_id>/', ProductionDetailView.as_view(), name='production-detail'),

    # Mortality & flock counts
    path('mortality/', MortalityListView.as_view(), name='mortality-list'),
    path('flock/', FlockRecordListView.as_view(), name='flock-record-list'),

    # Egg dispatch
    path('dispatch/', DispatchListView.as_view(), name='dispatch-list'),

    # Production cycles
    path('production-cycles/', ProductionCycleListView.as_view(), name='production-cycle-list'),
    path('production-cycles/<uuid:cycle_id>/', ProductionCycleDetailView.as_view(), name='production-cycle-detail'),
    path(
        'production-cycles/<uuid:cycle_id>/activate/',
        ProductionCycleActivateView.as_view(),
        name='production-cycle-activate'
    ),
]

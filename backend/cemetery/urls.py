from django.urls import path
from .views import (
    cemetery_list_create, cemetery_detail, cemetery_statistics_view,
    section_list_create, section_detail,
    block_list_create, block_detail,
    plot_list_create, plot_detail, plot_release, plot_search,
    gravestone_list_create, gravestone_detail
)

urlpatterns = [
    path('cemeteries/', cemetery_list_create, name='cemetery-list-create'),
    path('cemeteries/<int:pk>/', cemetery_detail, name='cemetery-detail'),
    path('cemeteries/<int:pk>/statistics/', cemetery_statistics_view, name='cemetery-statistics'),
    path('cemetery-sections/', section_list_create, name='cemetery-section-list-create'),
    path('cemetery-sections/<int:pk>/', section_detail, name='cemetery-section-detail'),
    path('cemetery-blocks/', block_list_create, name='cemetery-block-list-create'),
    path('cemetery-blocks/<int:pk>/', block_detail, name='cemetery-block-detail'),
    path('plots/', plot_list_create, name='plot-list-create'),
    path('plots/search/', plot_search, name='plot-search'),
    path('plots/<int:pk>/', plot_detail, name='plot-detail'),
    path('plots/<int:pk>/release/', plot_release, name='plot-release'),
    path('gravestones/', gravestone_list_create, name='gravestone-list-create'),
    path('gravestones/<int:pk>/', gravestone_detail, name='gravestone-detail'),
]

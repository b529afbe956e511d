from django.urls import path

from . import views

app_name = 'delivery'

urlpatterns = [
    path('calculate-fee/', views.CalculateDeliveryFeeView.as_view(), name='calculate-fee'),
    path('validate-postcode/', views.ValidatePostcodeView.as_view(), name='validate-postcode'),
    path('config/', views.DeliveryConfigView.as_view(), name='config'),
]

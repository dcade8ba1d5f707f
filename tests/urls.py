from django.urls import include, path

urlpatterns = [
    path('shop/', include('tillman.urls')),
]

from django.conf import settings
from django.http import JsonResponse
from django.shortcuts import redirect


def index(request):
    # The admin UI is a separate SPA; send browsers there
    return redirect(settings.FRONTEND_URL)


def health(request):
    return JsonResponse({"status": "ok"})

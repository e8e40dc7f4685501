from __future__ import annotations

from functools import wraps
from typing import Any, Callable

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import redirect

ViewFunc = Callable[..., HttpResponse]


def _wants_json(request: HttpRequest) -> bool:
    accept = request.headers.get("Accept", "")
    return "application/json" in accept or request.headers.get("X-Requested-With") == "XMLHttpRequest"


def role_required(user_attr: str, redirect_to: str) -> Callable[[ViewFunc], ViewFunc]:
    """
    Guards a view by a boolean attribute on the user (is_manager / is_employee).

    Page requests are redirected (to login, or to the other role's home).
    Fetch/XHR requests get a JSON error instead of an HTML redirect.
    """
    def decorator(view_func: ViewFunc) -> ViewFunc:
        @wraps(view_func)
        def _wrapped(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
            if not request.user.is_authenticated:
                if _wants_json(request):
                    return JsonResponse({"ok": False, "error": "Authentication required."}, status=401)
                return redirect("login")
            if not getattr(request.user, user_attr, False):
                if _wants_json(request):
                    return JsonResponse({"ok": False, "error": "Not allowed for your role."}, status=403)
                return redirect(redirect_to)
            return view_func(request, *args, **kwargs)

        return _wrapped

    return decorator


def manager_required(view_func: ViewFunc) -> ViewFunc:
    return role_required("is_manager", "employee_availability")(view_func)


def employee_required(view_func: ViewFunc) -> ViewFunc:
    return role_required("is_employee", "manager_dashboard")(view_func)

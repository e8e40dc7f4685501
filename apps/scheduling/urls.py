from django.urls import path

from . import views

urlpatterns = [
    # Manager: monthly planning
    path("manager/", views.manager_dashboard, name="manager_dashboard"),
    path("manager/requirements/day/", views.requirement_day, name="requirement_day"),
    path("manager/requirements/notes/", views.requirement_notes, name="requirement_notes"),
    path("manager/requirements/apply-patterns/", views.apply_patterns, name="apply_patterns"),
    path("manager/preferences/json/", views.preferences_json, name="preferences_json"),
    # Manager: AI schedules
    path("manager/schedules/generate/", views.generate_schedule_view, name="generate_schedule"),
    path("manager/schedules/<int:schedule_id>/", views.schedule_detail, name="schedule_detail"),
    path("manager/schedules/<int:schedule_id>/json/", views.schedule_json, name="schedule_json"),
    path("manager/schedules/<int:schedule_id>/publish/", views.publish_schedule_view, name="publish_schedule"),
    path("manager/schedules/<int:schedule_id>/unpublish/", views.unpublish_schedule_view, name="unpublish_schedule"),
    # Manager: resources
    path("manager/patterns/json/", views.patterns_list, name="patterns_list"),
    path("manager/patterns/create/", views.pattern_create, name="pattern_create"),
    path("manager/patterns/<int:pattern_id>/update/", views.pattern_update, name="pattern_update"),
    path("manager/patterns/<int:pattern_id>/delete/", views.pattern_delete, name="pattern_delete"),
    path("manager/positions/json/", views.positions_list, name="positions_list"),
    path("manager/positions/create/", views.position_create, name="position_create"),
    path("manager/positions/<int:position_id>/update/", views.position_update, name="position_update"),
    path("manager/positions/<int:position_id>/delete/", views.position_delete, name="position_delete"),
    # Employee
    path("employee/availability/", views.employee_availability_view, name="employee_availability"),
    path("employee/availability/day/", views.employee_availability_day, name="employee_availability_day"),
    path("employee/schedule/", views.employee_schedule_view, name="employee_schedule"),
    path("employee/schedule/json/", views.employee_schedule_json, name="employee_schedule_json"),
]

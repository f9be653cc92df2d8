# Routes package init
"""
CatHealth Backend — API Routes Package
========================================

Route Inventory:
    - auth.py:       /api/register, /api/login, /api/auth/*
    - cats.py:       /api/cats, /api/cats/{id}, /api/cats/{id}/image
    - records.py:    /api/cats/{catId}/records, /api/records/{id}[/file]
    - insurance.py:  /api/cats/{catId}/insurance, /api/insurance/{id}
    - calendar.py:   /api/calendar
    - todos.py:      /api/todos, /api/todos/suggestions, /api/todos/{id}
    - files.py:      /api/files/{path}   (public)
    - health.py:     /health             (public)

Routes stay thin: they pull data out of the request, resolve the caller
through the Authorization Gate (cathealth.dependencies), call a service
and pick the status code. Ownership and business rules live in services.
"""

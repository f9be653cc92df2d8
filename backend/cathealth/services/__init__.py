# Services package init
"""
CatHealth Backend — Services Layer
====================================

What:  Business rules between the routes (HTTP) and the database.
How:   Services receive the AsyncSession and the authenticated caller's
       TokenClaims per call, run ownership checks, and return response
       schemas. Routes never touch ORM objects directly.

Service Inventory:
    - AuthService:          register, login, token issue/verify, current user
    - ownership:            id parsing and the 404-then-403 owner checks
    - CatService:           cat CRUD, image upload, cascade delete
    - HealthRecordService:  record CRUD, document upload, calendar feed
    - InsuranceService:     policy CRUD
    - TodoService:          to-do CRUD and suggested reminders
    - FileService:          upload validation, storage, cleanup, serving
"""

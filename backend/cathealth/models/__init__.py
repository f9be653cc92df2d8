"""
CatHealth Backend — ORM Models
================================

Importing this package registers every table with Base.metadata
(Database.create_all and Alembic's env.py rely on that).

Ownership graph:
    User ─┬─< Cat ─┬─< HealthRecord
          │        └─< InsurancePolicy
          └─< HealthTodo >─ Cat (optional)
"""

from cathealth.models.user import User
from cathealth.models.cat import Cat
from cathealth.models.health_record import HealthRecord, RecordType
from cathealth.models.insurance import InsurancePolicy
from cathealth.models.todo import HealthTodo

__all__ = [
    "User",
    "Cat",
    "HealthRecord",
    "RecordType",
    "InsurancePolicy",
    "HealthTodo",
]

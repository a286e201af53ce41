from __future__ import annotations

"""
Payroll example: employees keyed by name, with the name doubling as record id.

Public functions:

    initialize(env) -> None
    hire(env, name, salary, active=True) -> Record
    get_employee(env, name) -> Record
    fire(env, name) -> Record
    staff(env) -> list[Record]
    headcount(env) -> int
    give_raise(env, name, amount) -> Record
    deactivate(env, name) -> Record
    total_payroll(env) -> float               sum of salaries of active staff
"""

from typing import Final, List

from recstore.core.schema import FieldSpec, RecordSchema
from recstore.core.table import Record
from recstore.runtime.context import Env
from recstore.store import RecordStore

EMPLOYEE = RecordSchema(
    "employee",
    [
        FieldSpec("name", "text", placeholder="Unnamed"),
        FieldSpec("salary", "amount"),
        FieldSpec("active", "flag", default=True),
    ],
    key="name",
)

STORE: Final[RecordStore] = RecordStore(EMPLOYEE, "payroll", id_policy="natural")


def initialize(env: Env) -> None:
    STORE.initialize(env)


def hire(env: Env, name: str, salary: float, active: bool = True) -> Record:
    return STORE.add(env, name=name, salary=salary, active=active)


def get_employee(env: Env, name: str) -> Record:
    return STORE.find_by_key(env, name)


def fire(env: Env, name: str) -> Record:
    return STORE.remove_by_key(env, name)


def staff(env: Env) -> List[Record]:
    return STORE.list(env)


def headcount(env: Env) -> int:
    return STORE.count(env)


def give_raise(env: Env, name: str, amount: float) -> Record:
    # A negative amount is a pay cut; going below zero fails with InvalidState.
    return STORE.adjust(env, name, lambda f: {**f, "salary": f["salary"] + amount})


def deactivate(env: Env, name: str) -> Record:
    return STORE.update(env, name, active=False)


def total_payroll(env: Env) -> float:
    return float(sum(r["salary"] for r in STORE.list(env) if r["active"]))


__all__ = [
    "EMPLOYEE",
    "STORE",
    "initialize",
    "hire",
    "get_employee",
    "fire",
    "staff",
    "headcount",
    "give_raise",
    "deactivate",
    "total_payroll",
]

"""
core
----

Core planning components:

- Setup, Operator, Session, Application, Module:
  Entities exchanged with the repository.

- HardRule & define_hard_rules, ConstraintManager:
  Confirmation rules a session must satisfy before it becomes confirmed.

- PlanningState:
  The in-memory read model owned by the state projection.
"""

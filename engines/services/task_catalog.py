"""
Task Catalog

Lookup over billable task definitions. Leaf dependency for pricing and
shift classification.
"""

from collections.abc import Iterable

from engines.schemas.pricing import TaskCategory, TaskDefinition, highest_priority_category

DEFAULT_TASKS: tuple[TaskDefinition, ...] = (
    TaskDefinition(id="personal-care", name="Personal Care", included_minutes=45),
    TaskDefinition(id="companionship", name="Companionship Visit", included_minutes=60),
    TaskDefinition(id="meal-prep", name="Meal Preparation", included_minutes=30),
    TaskDefinition(id="medication", name="Medication Reminders", included_minutes=15),
    TaskDefinition(id="light-housekeeping", name="Light Housekeeping", included_minutes=30),
    TaskDefinition(id="transportation", name="Transportation Assistance", included_minutes=45),
    TaskDefinition(id="respite", name="Respite Care", included_minutes=60),
    TaskDefinition(
        id="doctor-escort",
        name="Doctor Appointment Escort",
        included_minutes=60,
        category=TaskCategory.DOCTOR,
    ),
    TaskDefinition(
        id="hospital-visit",
        name="Hospital Pick-up/Drop-off (Discharge)",
        included_minutes=90,
        category=TaskCategory.HOSPITAL,
    ),
)


class TaskCatalog:
    """Immutable id -> TaskDefinition index."""

    def __init__(self, tasks: Iterable[TaskDefinition] = DEFAULT_TASKS):
        self._tasks: dict[str, TaskDefinition] = {task.id: task for task in tasks}

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: str) -> bool:
        return task_id in self._tasks

    def get(self, task_id: str) -> TaskDefinition | None:
        return self._tasks.get(task_id)

    def all(self, include_inactive: bool = False) -> list[TaskDefinition]:
        return [t for t in self._tasks.values() if include_inactive or t.is_active]

    def resolve(self, task_ids: Iterable[str], include_inactive: bool = False) -> list[TaskDefinition]:
        """Return known tasks for the ids, in order. Unknown ids are skipped."""
        resolved = []
        for task_id in task_ids:
            task = self._tasks.get(task_id)
            if task is None:
                continue
            if not task.is_active and not include_inactive:
                continue
            resolved.append(task)
        return resolved

    def category_for(self, task_ids: Iterable[str]) -> TaskCategory:
        """Highest-priority category among the selected tasks."""
        return highest_priority_category(t.category for t in self.resolve(task_ids))

    def service_names(self, task_ids: Iterable[str]) -> list[str]:
        """Display names for the shift record; unknown ids keep their raw id."""
        return [
            self._tasks[task_id].name if task_id in self._tasks else task_id
            for task_id in task_ids
        ]

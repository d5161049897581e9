"""
Task model factory for testing.
"""
import factory
from factory import Faker, LazyFunction

from task_manager.models.base import new_id, utcnow
from task_manager.models.task import Task


class TaskFactory(factory.Factory):
    """Factory for Task model. `owner_id` must be supplied."""

    class Meta:
        model = Task

    id = LazyFunction(new_id)
    description = Faker('sentence', nb_words=4)
    completed = False
    owner_id = None

    created_at = LazyFunction(utcnow)
    updated_at = factory.LazyAttribute(lambda obj: obj.created_at)

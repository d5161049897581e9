"""
User model factory for testing.
Uses Factory Boy to generate realistic test data with Faker.
"""
import factory
from factory import Faker, LazyFunction
from passlib.context import CryptContext

from task_manager.models.base import new_id, utcnow
from task_manager.models.user import User

DEFAULT_PASSWORD = "Str0ng#Secret"

# Low cost factor, test data only
_pwd_context = CryptContext(schemes=["bcrypt"], bcrypt__rounds=4)


class UserFactory(factory.Factory):
    """Factory for User model. Instances are built, not persisted."""

    class Meta:
        model = User

    id = LazyFunction(new_id)
    name = Faker('name')
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    hashed_password = LazyFunction(lambda: _pwd_context.hash(DEFAULT_PASSWORD))
    age = Faker('random_int', min=0, max=90)
    avatar = None

    created_at = LazyFunction(utcnow)
    updated_at = factory.LazyAttribute(lambda obj: obj.created_at)

"""Vehicle and user directory (plain CRUD, session-scoped)."""

from __future__ import annotations

import logging
import uuid

from pydantic import SecretStr, ValidationError

from fleetvision._constants import DEMO_ADMIN_EMAIL, DEMO_ADMIN_PASSWORD, DEMO_VEHICLES
from fleetvision.exceptions import DirectoryError, FleetValidationError
from fleetvision.models.directory import RecordStatus, User, UserRole, Vehicle

_logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex[:9]


def _contains(haystack: str, needle: str | None) -> bool:
    return not needle or needle.lower() in haystack.lower()


class Directory:
    """Owns the vehicle and user lists.

    Records are kept in insertion order. Deleting a vehicle does not touch
    validation records that reference it.
    """

    def __init__(self, vehicles: list[Vehicle] | None = None, users: list[User] | None = None) -> None:
        self._vehicles: dict[str, Vehicle] = {v.id: v for v in vehicles or []}
        self._users: dict[str, User] = {u.id: u for u in users or []}

    @classmethod
    def with_demo_data(cls) -> Directory:
        vehicles = [
            Vehicle(id=vid, name=name, plate=plate, status=RecordStatus(status))
            for vid, name, plate, status in DEMO_VEHICLES
        ]
        admin = User(
            id="admin",
            name="Administrator",
            email=DEMO_ADMIN_EMAIL,
            role=UserRole.ADMIN,
            password=SecretStr(DEMO_ADMIN_PASSWORD),
        )
        return cls(vehicles=vehicles, users=[admin])

    # ------------------------------------------------------------------
    # Vehicles
    # ------------------------------------------------------------------

    @property
    def vehicles(self) -> list[Vehicle]:
        return list(self._vehicles.values())

    def active_vehicles(self) -> list[Vehicle]:
        return [v for v in self._vehicles.values() if v.is_active]

    def get_vehicle(self, vehicle_id: str) -> Vehicle | None:
        return self._vehicles.get(vehicle_id)

    def add_vehicle(self, name: str, plate: str, status: RecordStatus = RecordStatus.ACTIVE) -> Vehicle:
        try:
            vehicle = Vehicle(id=_new_id(), name=name, plate=plate, status=status)
        except ValidationError as exc:
            raise FleetValidationError("Vehicle name and plate are required") from exc
        self._vehicles[vehicle.id] = vehicle
        _logger.debug("Added vehicle %s (%s)", vehicle.id, vehicle.plate)
        return vehicle

    def update_vehicle(self, vehicle: Vehicle) -> Vehicle:
        if vehicle.id not in self._vehicles:
            raise DirectoryError(f"Unknown vehicle: {vehicle.id}")
        self._vehicles[vehicle.id] = vehicle
        return vehicle

    def delete_vehicle(self, vehicle_id: str) -> None:
        if self._vehicles.pop(vehicle_id, None) is None:
            raise DirectoryError(f"Unknown vehicle: {vehicle_id}")

    def filter_vehicles(
        self,
        *,
        name: str | None = None,
        plate: str | None = None,
        status: RecordStatus | None = None,
    ) -> list[Vehicle]:
        """Case-insensitive substring filter; ``None`` criteria match everything."""
        return [
            v
            for v in self._vehicles.values()
            if _contains(v.name, name) and _contains(v.plate, plate) and (status is None or v.status == status)
        ]

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    @property
    def users(self) -> list[User]:
        return list(self._users.values())

    def get_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def find_user_by_email(self, email: str) -> User | None:
        wanted = email.strip().lower()
        for user in self._users.values():
            if user.email.lower() == wanted:
                return user
        return None

    def add_user(
        self,
        name: str,
        email: str,
        password: str,
        confirm_password: str,
        *,
        role: UserRole = UserRole.USER,
        status: RecordStatus = RecordStatus.ACTIVE,
    ) -> User:
        if not password:
            raise FleetValidationError("A password is required for new users")
        if password != confirm_password:
            raise FleetValidationError("Passwords do not match")
        if self.find_user_by_email(email) is not None:
            raise FleetValidationError(f"E-mail already registered: {email}")
        try:
            user = User(
                id=_new_id(),
                name=name,
                email=email,
                role=role,
                status=status,
                password=SecretStr(password),
            )
        except ValidationError as exc:
            raise FleetValidationError("User name and a valid e-mail are required") from exc
        self._users[user.id] = user
        return user

    def update_user(
        self,
        user: User,
        *,
        password: str | None = None,
        confirm_password: str | None = None,
    ) -> User:
        """Replace *user*; the stored password is kept unless a new one is given."""
        current = self._users.get(user.id)
        if current is None:
            raise DirectoryError(f"Unknown user: {user.id}")
        if password:
            if password != confirm_password:
                raise FleetValidationError("Passwords do not match")
            user = user.model_copy(update={"password": SecretStr(password)})
        elif user.password is None:
            user = user.model_copy(update={"password": current.password})
        self._users[user.id] = user
        return user

    def delete_user(self, user_id: str) -> None:
        if self._users.pop(user_id, None) is None:
            raise DirectoryError(f"Unknown user: {user_id}")

    def filter_users(
        self,
        *,
        name: str | None = None,
        email: str | None = None,
        status: RecordStatus | None = None,
    ) -> list[User]:
        return [
            u
            for u in self._users.values()
            if _contains(u.name, name) and _contains(u.email, email) and (status is None or u.status == status)
        ]

from __future__ import annotations

from dataclasses import dataclass

from ..models import Profile, ProfileUpsert, Role
from .base import TableClient, eq

PROFILE_LIST_COLUMNS = "id,username,role,created_at"


@dataclass
class ProfilesClient(TableClient):
    table: str = "profiles"

    def get_profile(self, user_id: str) -> Profile:
        data = self._select({"select": "*", "id": eq(user_id)}, single=True, operation="get_profile")
        if not isinstance(data, dict):
            raise ValueError("Expected profile response to be a JSON object")
        return Profile.model_validate(data)

    def list_profiles(self) -> list[Profile]:
        data = self._select(
            {"select": PROFILE_LIST_COLUMNS, "order": "created_at.desc"},
            operation="list_profiles",
        )
        if not isinstance(data, list):
            raise ValueError("Expected profile list response to be a JSON array")
        return [Profile.model_validate(row) for row in data]

    def update_role(self, user_id: str, role: Role) -> Profile | None:
        data = self._update({"id": eq(user_id)}, {"role": role.value}, operation="update_role")
        if not data:
            return None
        row = data[0] if isinstance(data, list) else data
        return Profile.model_validate(row)

    def delete_profile(self, user_id: str) -> None:
        self._delete({"id": eq(user_id)}, operation="delete_profile")

    def upsert_profile(self, profile: ProfileUpsert) -> None:
        self._request(
            "POST",
            self._path,
            params={"on_conflict": "id"},
            json_body=profile.model_dump(mode="json", exclude_none=True),
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            table=self.table,
            operation="upsert_profile",
        )

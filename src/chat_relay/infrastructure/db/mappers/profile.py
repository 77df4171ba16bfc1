from __future__ import annotations

from typing import Any

from chat_relay.domain.entities.profile import Profile
from chat_relay.domain.value_objects.ids import ProfileId
from chat_relay.infrastructure.db.models.profile import ProfileModel


def model_to_entity(model: ProfileModel) -> Profile:
    return Profile(
        id=ProfileId(model.id),
        name=model.name,
        avatar=model.avatar,
        pseudo=model.pseudo,
    )


def entity_to_values(entity: Profile) -> dict[str, Any]:
    return {
        "id": entity.id,
        "name": entity.name,
        "avatar": entity.avatar,
        "pseudo": entity.pseudo,
    }

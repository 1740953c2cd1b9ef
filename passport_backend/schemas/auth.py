from typing import Optional
from uuid import UUID
from .base import BaseSchema


class Actor(BaseSchema):
    """Вызывающий пользователь, восстановленный из bearer-токена"""
    subject_id: UUID
    expert_id: Optional[UUID] = None

    @property
    def is_expert(self) -> bool:
        return self.expert_id is not None

    @property
    def acting_id(self) -> UUID:
        """ID эксперта для эксперта, иначе ID пользователя"""
        return self.expert_id if self.expert_id is not None else self.subject_id

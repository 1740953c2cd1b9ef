# passport_backend/exceptions.py
"""
Доменные ошибки сервисов записей и рейтингов.

Каждая ошибка знает свой HTTP-статус; приложение отдаёт их клиенту
через общий обработчик (см. main.py).
"""


class ExpertRatingError(Exception):
    """Базовая ошибка домена"""
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ExpertRatingError):
    """Сущность не найдена"""
    status_code = 404


class ValidationError(ExpertRatingError):
    """Некорректные входные данные"""
    status_code = 422


class ConflictError(ExpertRatingError):
    """Нарушение уникальности или однократной записи"""
    status_code = 409


class ForbiddenError(ExpertRatingError):
    """Нет прав на целевую сущность"""
    status_code = 403


class InvalidStateError(ExpertRatingError):
    """Операция недопустима в текущем статусе"""
    status_code = 400


class InvalidTransitionError(InvalidStateError):
    """Недопустимый переход статуса записи"""

    def __init__(self, current, target):
        super().__init__(f"Invalid status transition from {current} to {target}")
        self.current = current
        self.target = target

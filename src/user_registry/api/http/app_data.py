from dataclasses import dataclass

from src.user_registry.core.services import DbSessionService


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService

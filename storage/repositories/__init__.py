from .batches import BatchRepository
from .mappings import MappingRepository
from .referees import RefereeRepository
from .settings import SettingsRepository

__all__ = [
    "BatchRepository",
    "MappingRepository",
    "RefereeRepository",
    "SettingsRepository",
]

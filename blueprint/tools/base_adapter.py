from abc import ABC, abstractmethod
from blueprint.models.items import FetchOutcome

class SourceAdapter(ABC):
    @abstractmethod
    async def fetch(self, handle: str) -> FetchOutcome:
        pass

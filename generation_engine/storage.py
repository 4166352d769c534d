"""Article persistence port plus two small stores.

The surrounding site owns the real document store; the core only needs a
case-insensitive title lookup and an insert.
"""

import asyncio
import json
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from trendwise.errors import PersistenceUnavailable

from .models import GeneratedContent

logger = logging.getLogger(__name__)


def _title_key(title: str) -> str:
    return " ".join(title.split()).casefold()


class ArticleStore(ABC):
    """Persistence collaborator used by the generation orchestrator."""

    @abstractmethod
    async def find_by_title(self, title: str) -> Optional[GeneratedContent]:
        """Return the stored record whose title matches case-insensitively."""

    @abstractmethod
    async def insert(self, content: GeneratedContent) -> str:
        """Store *content* and return its id."""


class InMemoryArticleStore(ArticleStore):
    """Dict-backed store for tests and dry runs."""

    def __init__(self):
        self._records: Dict[str, GeneratedContent] = {}
        self._ids_by_title: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._records)

    async def find_by_title(self, title: str) -> Optional[GeneratedContent]:
        record_id = self._ids_by_title.get(_title_key(title))
        return self._records.get(record_id) if record_id else None

    async def insert(self, content: GeneratedContent) -> str:
        key = _title_key(content.title)
        if key in self._ids_by_title:
            return self._ids_by_title[key]
        record_id = uuid.uuid4().hex
        self._records[record_id] = content
        self._ids_by_title[key] = record_id
        return record_id


class JsonFileArticleStore(ArticleStore):
    """Stores every article in a single JSON document under the data directory."""

    def __init__(self, data_dir: Path = Path("data")):
        self.data_dir = Path(data_dir)
        self.state_file = self.data_dir / "articles.json"
        self._lock = asyncio.Lock()

    def load_state(self) -> Dict:
        """Load store state from file."""
        if not self.state_file.exists():
            return {'articles': {}, 'created_at': datetime.now().isoformat()}
        try:
            with open(self.state_file, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceUnavailable(f"Could not load article store {self.state_file}: {e}") from e

    def save_state(self, state: Dict):
        """Save store state to file."""
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            tmp_file = self.state_file.with_suffix(".tmp")
            with open(tmp_file, 'w', encoding='utf-8') as f:
                json.dump(state, f, indent=2, default=str)
            tmp_file.replace(self.state_file)
        except OSError as e:
            raise PersistenceUnavailable(f"Could not save article store {self.state_file}: {e}") from e

    def list_articles(self) -> List[GeneratedContent]:
        state = self.load_state()
        return [GeneratedContent.model_validate(record) for record in state['articles'].values()]

    def _find_id(self, state: Dict, title: str) -> Optional[str]:
        key = _title_key(title)
        for record_id, record in state['articles'].items():
            if _title_key(record.get('title', '')) == key:
                return record_id
        return None

    async def find_by_title(self, title: str) -> Optional[GeneratedContent]:
        state = self.load_state()
        record_id = self._find_id(state, title)
        if record_id is None:
            return None
        return GeneratedContent.model_validate(state['articles'][record_id])

    async def insert(self, content: GeneratedContent) -> str:
        async with self._lock:
            state = self.load_state()
            existing = self._find_id(state, content.title)
            if existing is not None:
                logger.warning(f"Article with this title already stored: {content.title}")
                return existing

            record_id = uuid.uuid4().hex
            state['articles'][record_id] = content.model_dump(mode="json")
            state['updated_at'] = datetime.now().isoformat()
            self.save_state(state)

        logger.info(f"Saved article {record_id}: {content.title}")
        return record_id

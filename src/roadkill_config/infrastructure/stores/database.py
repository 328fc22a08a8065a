"""Database settings store: the settings document kept in a single table row.

The wiki keeps its site configuration in ``roadkill_siteconfiguration`` with
one row per configuration document (id, version, JSON content).  This store
reads and writes the row holding the application settings, so hosts that
already have a database do not need a settings file on disk.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import Column, String, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from roadkill_config import __version__
from roadkill_config.domain.errors import ConfigStoreError

from .json_file import parse_settings_document

logger = logging.getLogger(__name__)

Base = declarative_base()

# Fixed id of the row holding the application settings document.
SETTINGS_ROW_ID = "b960e8e5-529f-4f7c-aee4-28eb23e13dbd"


class SiteConfigurationRow(Base):
    __tablename__ = "roadkill_siteconfiguration"

    id = Column(String(36), primary_key=True)
    version = Column(String(32), nullable=False)
    content = Column(Text, nullable=False)


class DatabaseSettingsStore:
    """Settings row in ``roadkill_siteconfiguration``.

    Pass a SQLAlchemy URL (``sqlite:///roadkill.db``, ``postgresql://...``)
    or an existing ``Engine``.  The table is created on first use.
    """

    def __init__(
        self,
        url: str = "sqlite:///roadkill.db",
        engine: Optional[Engine] = None,
        row_id: str = SETTINGS_ROW_ID,
    ):
        self._engine = engine if engine is not None else create_engine(url)
        self._row_id = row_id
        self._session_factory = sessionmaker(bind=self._engine)
        self._schema_ready = False

    def _ensure_schema(self) -> None:
        if not self._schema_ready:
            Base.metadata.create_all(self._engine)
            self._schema_ready = True

    def load(self) -> Dict[str, Any]:
        try:
            self._ensure_schema()
            with self._session_factory() as session:
                row = session.get(SiteConfigurationRow, self._row_id)
                content = row.content if row is not None else None
        except SQLAlchemyError as e:
            raise ConfigStoreError(f"Cannot read settings row {self._row_id}: {e}") from e
        if content is None:
            logger.debug("No settings row %s", self._row_id)
            return {}
        return parse_settings_document(content, f"{SiteConfigurationRow.__tablename__}[{self._row_id}]")

    def save(self, values: Mapping[str, Any]) -> None:
        content = json.dumps(dict(values), sort_keys=True, ensure_ascii=False)
        try:
            self._ensure_schema()
            with self._session_factory.begin() as session:
                row = session.get(SiteConfigurationRow, self._row_id)
                if row is None:
                    session.add(SiteConfigurationRow(id=self._row_id, version=__version__, content=content))
                else:
                    row.content = content
                    row.version = __version__
        except SQLAlchemyError as e:
            raise ConfigStoreError(f"Cannot write settings row {self._row_id}: {e}") from e
        logger.debug("Wrote %d settings to row %s", len(values), self._row_id)

import json
import logging
import os
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


class Config:
    # Root namespace of the application (App\Model\Entity\...)
    APP_NAMESPACE = os.environ.get('APP_NAMESPACE') or 'App'
    # Generic entity class used when no concrete entity class exists
    ENTITY_BASE_CLASS = os.environ.get('ENTITY_BASE_CLASS') or '\\Cake\\ORM\\Entity'
    # JSON object of storage type -> docblock type overrides
    IDE_HELPER_TYPE_MAP = os.environ.get('IDE_HELPER_TYPE_MAP', '{}')
    # Database the column schema is reflected from
    DATABASE_URL = os.environ.get('DATABASE_URL') or 'sqlite:///app.db'
    ANNOTATOR_LOG_LEVEL = os.environ.get('ANNOTATOR_LOG_LEVEL', 'INFO')

    @classmethod
    def type_map_overrides(cls):
        """Parsed IDE_HELPER_TYPE_MAP; invalid JSON counts as no overrides."""
        try:
            overrides = json.loads(cls.IDE_HELPER_TYPE_MAP or '{}')
        except ValueError as e:
            logger.warning("Ignoring invalid IDE_HELPER_TYPE_MAP: %s", e)
            return {}
        if not isinstance(overrides, dict):
            logger.warning("Ignoring IDE_HELPER_TYPE_MAP: expected a JSON object")
            return {}
        return {str(k): str(v) for k, v in overrides.items()}

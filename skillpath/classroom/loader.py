"""
ContentLoader - Load topic trees and lesson content from a content directory.

Layout:
    {content_dir}/topics/{topic}.json   (or .yaml / .yml)
    {content_dir}/lessons/{lesson_id}.json

Missing files load as None. Files that don't match the schemas raise
ValidationError.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Type, TypeVar

import yaml
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from skillpath.errors import ValidationError
from skillpath.schemas import LessonContent, Topic

logger = logging.getLogger(__name__)

TOPIC_SUFFIXES = (".json", ".yaml", ".yml")

ModelT = TypeVar("ModelT", bound=BaseModel)


def _read_model(path: Path, model: Type[ModelT]) -> ModelT:
    """Parse a JSON or YAML file into a schema model."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValidationError(f"Could not parse {path}: {e}") from e

    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {model.__name__} in {path}: {e}") from e


class ContentLoader:
    """
    Read-only access to topic and lesson files.

    Topics are cached per loader; content is treated as immutable once loaded.
    """

    def __init__(self, content_dir: str | Path):
        self.content_dir = Path(content_dir)
        self._topics: dict[str, Topic] = {}

    def load_topic(self, name: str) -> Optional[Topic]:
        """Load a topic tree by name, or None if no file exists."""
        if name in self._topics:
            return self._topics[name]

        for suffix in TOPIC_SUFFIXES:
            path = self.content_dir / "topics" / f"{name}{suffix}"
            if path.exists():
                topic = _read_model(path, Topic)
                self._topics[name] = topic
                logger.info(f"Loaded topic {name}: {len(topic.nodes())} nodes")
                return topic

        logger.warning(f"Topic not found: {name}")
        return None

    def load_lesson(self, lesson_id: str, content_ref: Optional[str] = None) -> Optional[LessonContent]:
        """
        Load lesson content.

        Args:
            lesson_id: Lesson identifier
            content_ref: Optional path relative to content_dir (from LessonRef)

        Returns:
            LessonContent or None if no file exists
        """
        candidates = []
        if content_ref:
            candidates.append(self.content_dir / content_ref)
        candidates.append(self.content_dir / "lessons" / f"{lesson_id}.json")

        for path in candidates:
            if path.is_file():
                lesson = _read_model(path, LessonContent)
                if lesson.lesson_id != lesson_id:
                    raise ValidationError(
                        f"Lesson file {path} holds {lesson.lesson_id}, expected {lesson_id}"
                    )
                return lesson

        logger.warning(f"Lesson not found: {lesson_id}")
        return None
